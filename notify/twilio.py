"""Twilio SMS notifier.

Sends the arrival message as an SMS through the Twilio REST API:

    POST https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json
    auth: (account_sid, auth_token)
    form: From, To, Body

Twilio answers 201 with the message resource on success, and a JSON
error object ({"code": ..., "message": ...}) otherwise.
"""

import logging
from typing import Optional

import requests

from core.errors import NotificationError
from notify.base import Notifier

logger = logging.getLogger(__name__)

API_BASE = "https://api.twilio.com/2010-04-01"


class TwilioNotifier(Notifier):
    """Send arrival messages as SMS via Twilio."""

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        to_number: str,
        timeout: float = 10,
        session: Optional[requests.Session] = None,
        api_base: str = API_BASE,
    ):
        self.account_sid = account_sid
        self.from_number = from_number
        self.to_number = to_number
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.auth = (account_sid, auth_token)
        self._url = f"{api_base.rstrip('/')}/Accounts/{account_sid}/Messages.json"

    def send_arrival(self, message: str) -> None:
        try:
            resp = self._session.post(
                self._url,
                data={
                    "From": self.from_number,
                    "To": self.to_number,
                    "Body": message,
                },
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to send SMS", extra={"error": str(exc)})
            raise NotificationError(f"Twilio request failed: {exc}") from exc

        if not 200 <= resp.status_code < 300:
            detail = _error_detail(resp)
            logger.error(
                "Failed to send SMS",
                extra={"status": resp.status_code, "error": detail},
            )
            raise NotificationError(f"Twilio returned {resp.status_code}: {detail}")

        sid = None
        try:
            sid = resp.json().get("sid")
        except ValueError:
            pass
        logger.info("SMS sent successfully", extra={"message_sid": sid})

    def close(self) -> None:
        self._session.close()


def _error_detail(resp) -> str:
    """Pull Twilio's error message out of a failed response."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200] or resp.reason or "no details"
    if isinstance(body, dict) and body.get("message"):
        code = body.get("code")
        return f"{body['message']} (code {code})" if code else body["message"]
    return str(body)[:200]
