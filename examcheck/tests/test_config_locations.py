from __future__ import annotations

import pytest

from examcheck.config import Settings, load_settings
from examcheck.domain import ConfigurationError

_ENV_VARS = (
    "NTFY_TOPIC",
    "NTFY_BASE_URL",
    "LOCATION_IDS",
    "IDENTIFIERS_FILE",
    "BOOKING_URL",
    "CHECK_INTERVAL_SECONDS",
    "NOTIFY_COOLDOWN_SECONDS",
    "STATUS_LOG_INTERVAL_SECONDS",
    "REQUEST_TIMEOUT_SECONDS",
    "VERIFY_TLS",
)


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> pytest.MonkeyPatch:
    # setenv+delenv so that monkeypatch also undoes anything load_dotenv() writes.
    for name in _ENV_VARS:
        monkeypatch.setenv(name, "x")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture
def empty_dotenv(tmp_path) -> str:
    path = tmp_path / ".env"
    path.write_text("", encoding="utf-8")
    return str(path)


def test_load_settings_defaults(env: pytest.MonkeyPatch, empty_dotenv: str) -> None:
    settings = load_settings(dotenv_path=empty_dotenv)
    assert settings == Settings()
    assert settings.ntfy_topic == "trafikcheck_129391"
    assert settings.location_id == 1000333
    assert settings.nearby_location_ids == (1000302, 1000334)
    assert settings.identifiers_file == "personnummer.txt"
    assert settings.check_interval_seconds == 30
    assert settings.notify_cooldown_seconds == 600
    assert settings.status_log_interval_seconds == 3600
    assert settings.verify_tls is False


def test_load_settings_parses_location_ids(env: pytest.MonkeyPatch, empty_dotenv: str) -> None:
    # Spaces, empty parts and zero (unused) nearby slots.
    env.setenv("LOCATION_IDS", " 1000140, 0,,1000071 ")

    settings = load_settings(dotenv_path=empty_dotenv)
    assert settings.location_id == 1000140
    assert settings.nearby_location_ids == (1000071,)
    assert settings.location_slots == (1000140, 0, 1000071, 0)


@pytest.mark.parametrize(
    "raw, message",
    [
        ("abc", r"Invalid LOCATION_IDS value"),
        (" , ,", r"LOCATION_IDS is empty"),
        ("0,1000302", r"Primary location code must be non-zero"),
        ("1,2,3,4,5", r"at most 4 codes"),
    ],
)
def test_load_settings_rejects_bad_location_ids(env: pytest.MonkeyPatch, empty_dotenv: str, raw: str, message: str) -> None:
    env.setenv("LOCATION_IDS", raw)
    with pytest.raises(ConfigurationError, match=message):
        load_settings(dotenv_path=empty_dotenv)


def test_load_settings_rejects_bad_intervals(env: pytest.MonkeyPatch, empty_dotenv: str) -> None:
    env.setenv("CHECK_INTERVAL_SECONDS", "soon")
    with pytest.raises(ConfigurationError, match=r"CHECK_INTERVAL_SECONDS must be an integer"):
        load_settings(dotenv_path=empty_dotenv)

    env.setenv("CHECK_INTERVAL_SECONDS", "-1")
    with pytest.raises(ConfigurationError, match=r"CHECK_INTERVAL_SECONDS must be >= 0"):
        load_settings(dotenv_path=empty_dotenv)


@pytest.mark.parametrize("raw, expected", [("1", True), ("yes", True), ("TRUE", True), ("0", False), ("no", False)])
def test_load_settings_verify_tls(env: pytest.MonkeyPatch, empty_dotenv: str, raw: str, expected: bool) -> None:
    env.setenv("VERIFY_TLS", raw)
    assert load_settings(dotenv_path=empty_dotenv).verify_tls is expected


def test_load_settings_reads_dotenv_without_overriding_env(env: pytest.MonkeyPatch, tmp_path) -> None:
    dotenv = tmp_path / ".env"
    dotenv.write_text("NTFY_TOPIC=from-file\nIDENTIFIERS_FILE=ids.txt\n", encoding="utf-8")
    env.setenv("NTFY_TOPIC", "from-env")

    settings = load_settings(dotenv_path=str(dotenv))
    assert settings.ntfy_topic == "from-env"
    assert settings.identifiers_file == "ids.txt"


def test_with_locations_overrides_single_slots() -> None:
    settings = Settings(location_slots=(1, 2, 3, 0))

    assert settings.with_locations(location4=4).nearby_location_ids == (2, 3, 4)
    assert settings.with_locations(location2=0).nearby_location_ids == (3,)

    moved = settings.with_locations(location1=9)
    assert moved.location_id == 9
    assert moved.nearby_location_ids == (2, 3)


def test_with_locations_keeps_settings_when_nothing_given() -> None:
    settings = Settings()
    assert settings.with_locations() == settings


def test_with_locations_rejects_zero_primary() -> None:
    with pytest.raises(ConfigurationError, match=r"non-zero"):
        Settings().with_locations(location1=0)


def test_cli_override_replaces_slot_after_unused_env_slot(env: pytest.MonkeyPatch, empty_dotenv: str) -> None:
    # Slot 2 is unused in the environment; --location3 must still replace slot 3, not append.
    env.setenv("LOCATION_IDS", "1000333,0,1000334")

    settings = load_settings(dotenv_path=empty_dotenv).with_locations(location3=999)
    assert settings.location_slots == (1000333, 0, 999, 0)
    assert settings.location_id == 1000333
    assert settings.nearby_location_ids == (999,)


def test_cli_override_can_fill_unused_env_slot(env: pytest.MonkeyPatch, empty_dotenv: str) -> None:
    env.setenv("LOCATION_IDS", "1000333,0,1000334")

    settings = load_settings(dotenv_path=empty_dotenv).with_locations(location2=1000302)
    assert settings.nearby_location_ids == (1000302, 1000334)
