"""Arrival notification sinks.

    Notifier         -- interface: send_arrival(message)
    TwilioNotifier   -- SMS through the Twilio REST API
    ConsoleNotifier  -- logs the message; development fallback
"""

import logging

from notify.base import ConsoleNotifier, Notifier
from notify.twilio import TwilioNotifier

logger = logging.getLogger(__name__)

__all__ = ["Notifier", "ConsoleNotifier", "TwilioNotifier", "create_notifier"]


def create_notifier(config) -> Notifier:
    """Build the notifier for ``config``.

    Twilio when every credential is present, otherwise the console
    notifier. Production configs never reach the fallback because
    load_config() already rejected missing credentials.
    """
    if config.has_twilio_credentials:
        return TwilioNotifier(
            config.twilio_account_sid,
            config.twilio_auth_token,
            config.from_number,
            config.to_number,
        )
    logger.warning("Twilio credentials not set, arrival alerts will only be logged")
    return ConsoleNotifier()
