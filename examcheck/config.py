from __future__ import annotations

import os
from dataclasses import dataclass, replace

from dotenv import load_dotenv

from examcheck.booking_client import BOOKING_URL
from examcheck.domain import ConfigurationError
from examcheck.ntfy_notifier import NTFY_BASE_URL

MAX_LOCATIONS = 4


def _parse_location_ids(raw: str) -> tuple[int, ...]:
    # LOCATION_IDS is "primary,nearby,nearby,nearby"; 0 marks an unused slot. Examples:
    #   LOCATION_IDS=1000333
    #   LOCATION_IDS=1000333,0,1000334
    parts = [p.strip() for p in raw.split(",")]
    parts = [p for p in parts if p]
    if not parts:
        raise ConfigurationError("LOCATION_IDS is empty. Provide at least the primary location code.")
    if len(parts) > MAX_LOCATIONS:
        raise ConfigurationError(f"LOCATION_IDS accepts at most {MAX_LOCATIONS} codes, got {len(parts)}")

    codes: list[int] = []
    for p in parts:
        try:
            codes.append(int(p))
        except ValueError as e:
            raise ConfigurationError(f"Invalid LOCATION_IDS value: {p!r}. Expected integer location code.") from e

    return _location_slots(codes)


def _location_slots(codes: list[int]) -> tuple[int, ...]:
    # Always MAX_LOCATIONS positional slots so CLI overrides hit the slot they name.
    if codes[0] == 0:
        raise ConfigurationError("Primary location code must be non-zero")
    return tuple(codes) + (0,) * (MAX_LOCATIONS - len(codes))


def _int_env(name: str, default: int, *, minimum: int) -> int:
    raw = os.getenv(name, str(default)).strip()
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}")
    return value


@dataclass(frozen=True)
class Settings:
    ntfy_topic: str = "trafikcheck_129391"
    # primary, then up to three nearby codes; 0 = unused slot
    location_slots: tuple[int, ...] = (1000333, 1000302, 1000334, 0)

    # Relative to the working directory; re-read before every check
    identifiers_file: str = "personnummer.txt"

    booking_url: str = BOOKING_URL
    ntfy_base_url: str = NTFY_BASE_URL

    check_interval_seconds: int = 30
    # Extra pause after a hit so the same slots aren't pushed again right away
    notify_cooldown_seconds: int = 600
    status_log_interval_seconds: int = 3600
    request_timeout_seconds: int = 30

    # Certificate checks stay off for the booking API unless VERIFY_TLS is set
    verify_tls: bool = False

    @property
    def location_id(self) -> int:
        return self.location_slots[0]

    @property
    def nearby_location_ids(self) -> tuple[int, ...]:
        return tuple(c for c in self.location_slots[1:] if c != 0)

    def with_locations(
        self,
        location1: int | None = None,
        location2: int | None = None,
        location3: int | None = None,
        location4: int | None = None,
    ) -> "Settings":
        """Apply per-slot location overrides (CLI flags); ``None`` keeps the current code."""
        slots = list(self.location_slots)
        for i, override in enumerate((location1, location2, location3, location4)):
            if override is not None:
                slots[i] = override
        return replace(self, location_slots=_location_slots(slots))


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Everything is optional; defaults match a search around Västra Haninge.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    defaults = Settings()

    location_slots = defaults.location_slots
    locations_raw = os.getenv("LOCATION_IDS")
    if locations_raw is not None:
        location_slots = _parse_location_ids(locations_raw)

    verify_raw = os.getenv("VERIFY_TLS", "0").strip().lower()
    verify_tls = verify_raw in {"1", "true", "yes"}

    return Settings(
        ntfy_topic=os.getenv("NTFY_TOPIC") or defaults.ntfy_topic,
        location_slots=location_slots,
        identifiers_file=os.getenv("IDENTIFIERS_FILE") or defaults.identifiers_file,
        booking_url=os.getenv("BOOKING_URL") or defaults.booking_url,
        ntfy_base_url=os.getenv("NTFY_BASE_URL") or defaults.ntfy_base_url,
        check_interval_seconds=_int_env("CHECK_INTERVAL_SECONDS", defaults.check_interval_seconds, minimum=0),
        notify_cooldown_seconds=_int_env("NOTIFY_COOLDOWN_SECONDS", defaults.notify_cooldown_seconds, minimum=0),
        status_log_interval_seconds=_int_env(
            "STATUS_LOG_INTERVAL_SECONDS", defaults.status_log_interval_seconds, minimum=1
        ),
        request_timeout_seconds=_int_env("REQUEST_TIMEOUT_SECONDS", defaults.request_timeout_seconds, minimum=1),
        verify_tls=verify_tls,
    )
