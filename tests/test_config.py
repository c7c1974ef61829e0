import pytest

from config import DEFAULT_CONFIG_FILE, load_config
from core.errors import ConfigError

TWILIO = {
    "TWILIO_ACCOUNT_SID": "AC123",
    "TWILIO_AUTH_TOKEN": "secret",
    "FROM_NUMBER": "+15550001111",
    "TO_NUMBER": "+15550002222",
}


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep a stray arrival.yaml in the repo from leaking into tests."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_defaults():
    config = load_config(environ={})

    assert config.gpio_pin == 17
    assert config.cooldown_ms == 60000
    assert config.warmup_ms == 60000
    assert config.debounce_ms == 300
    assert config.active_from is None and config.active_to is None
    assert config.camera_enabled and config.photo_cleanup_enabled
    assert config.health_port == 3000
    assert config.app_env == "development"
    assert config.sensor_source == "simulated"
    assert not config.has_twilio_credentials


def test_environment_values_are_parsed():
    config = load_config(environ={
        "GPIO_PIN": "4",
        "COOLDOWN_MS": "120000",
        "WARMUP_MS": "0",
        "DEBOUNCE_MS": " 500 ",
        "ACTIVE_FROM": "09:00",
        "ACTIVE_TO": "17:30",
        "HEALTH_PORT": "8080",
    })

    assert config.gpio_pin == 4
    assert config.cooldown_ms == 120000
    assert config.warmup_ms == 0
    assert config.debounce_ms == 500
    assert (config.active_from, config.active_to) == ("09:00", "17:30")
    assert config.health_port == 8080


def test_production_requires_twilio_credentials():
    env = dict(TWILIO, APP_ENV="production")
    del env["TO_NUMBER"]

    with pytest.raises(ConfigError, match="TO_NUMBER"):
        load_config(environ=env)


def test_production_with_credentials_uses_gpio():
    config = load_config(environ=dict(TWILIO, APP_ENV="production"))

    assert config.production
    assert config.has_twilio_credentials
    assert config.sensor_source == "gpio"


def test_development_tolerates_missing_credentials():
    config = load_config(environ={"APP_ENV": "development"})
    assert not config.production


@pytest.mark.parametrize("key,value", [
    ("COOLDOWN_MS", "soon"),
    ("WARMUP_MS", "-1"),
    ("DEBOUNCE_MS", "1.5"),
    ("GPIO_PIN", "seventeen"),
    ("HEALTH_PORT", "70000"),
])
def test_invalid_numbers_are_rejected(key, value):
    with pytest.raises(ConfigError, match=key):
        load_config(environ={key: value})


def test_active_window_needs_both_ends():
    with pytest.raises(ConfigError, match="together"):
        load_config(environ={"ACTIVE_FROM": "09:00"})


def test_active_window_must_be_hh_mm():
    with pytest.raises(ConfigError, match="ACTIVE_TO"):
        load_config(environ={"ACTIVE_FROM": "09:00", "ACTIVE_TO": "5pm"})


def test_wrapping_active_window_is_rejected():
    with pytest.raises(ConfigError, match="midnight"):
        load_config(environ={"ACTIVE_FROM": "22:00", "ACTIVE_TO": "06:00"})


@pytest.mark.parametrize("value,expected", [
    ("false", False),
    ("true", True),
    ("False", True),
    ("0", True),
])
def test_feature_flags_only_disabled_by_false(value, expected):
    config = load_config(environ={"CAMERA_ENABLED": value, "PHOTO_CLEANUP_ENABLED": value})
    assert config.camera_enabled is expected
    assert config.photo_cleanup_enabled is expected


def test_unknown_sensor_source_is_rejected():
    with pytest.raises(ConfigError, match="SENSOR_SOURCE"):
        load_config(environ={"SENSOR_SOURCE": "carrier-pigeon"})


def test_unknown_log_level_is_rejected():
    with pytest.raises(ConfigError, match="LOG_LEVEL"):
        load_config(environ={"LOG_LEVEL": "LOUD"})


def test_yaml_file_with_lowercase_keys(tmp_path):
    path = tmp_path / "home.yaml"
    path.write_text(
        "cooldown_ms: 30000\n"
        "active_from: 07:30\n"
        "active_to: 17:45\n"
        "camera_enabled: false\n"
    )
    config = load_config(str(path), environ={})

    assert config.cooldown_ms == 30000
    assert (config.active_from, config.active_to) == ("07:30", "17:45")
    assert config.camera_enabled is False


def test_environment_overrides_yaml(tmp_path):
    path = tmp_path / "home.yaml"
    path.write_text("COOLDOWN_MS: 30000\nWARMUP_MS: 1000\n")
    config = load_config(str(path), environ={"COOLDOWN_MS": "90000"})

    assert config.cooldown_ms == 90000
    assert config.warmup_ms == 1000


def test_default_yaml_file_is_picked_up(isolated_cwd):
    (isolated_cwd / DEFAULT_CONFIG_FILE).write_text("gpio_pin: 22\n")
    assert load_config(environ={}).gpio_pin == 22


def test_missing_explicit_yaml_is_an_error(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read"):
        load_config(str(tmp_path / "nope.yaml"), environ={})


def test_yaml_must_be_a_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(str(path), environ={})


def test_policy_from_config():
    config = load_config(environ={
        "WARMUP_MS": "1000", "DEBOUNCE_MS": "50", "COOLDOWN_MS": "2000",
        "ACTIVE_FROM": "08:00", "ACTIVE_TO": "20:00",
    })
    policy = config.policy()

    assert (policy.warmup_ms, policy.debounce_ms, policy.cooldown_ms) == (1000, 50, 2000)
    assert (policy.active_window.start, policy.active_window.end) == ("08:00", "20:00")


def test_summary_omits_secrets():
    config = load_config(environ=dict(TWILIO))
    summary = config.summary()

    assert "secret" not in str(summary)
    assert summary["gpio_pin"] == 17


def test_unquoted_yaml_times_stay_text(tmp_path):
    path = tmp_path / "home.yaml"
    path.write_text("active_from: 00:05\nactive_to: 23:59\nhealth_port: 8080\n")
    config = load_config(str(path), environ={})

    assert (config.active_from, config.active_to) == ("00:05", "23:59")
    assert config.health_port == 8080


@pytest.mark.parametrize("raw", ["1000", "545", "9:05"])
def test_yaml_time_that_is_not_hh_mm_is_rejected(tmp_path, raw):
    path = tmp_path / "home.yaml"
    path.write_text(f"active_from: {raw}\nactive_to: '18:00'\n")
    with pytest.raises(ConfigError, match="ACTIVE_FROM must be HH:MM"):
        load_config(str(path), environ={})
