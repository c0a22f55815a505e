from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Occasion:
    """A single bookable exam slot as returned by the booking API."""

    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    location_name: str

    def describe(self) -> str:
        return f"{self.date} {self.time} at {self.location_name}"


@dataclass(frozen=True)
class Bundle:
    """A group of occasions for one search window."""

    occasions: tuple[Occasion, ...] = ()


class ConfigurationError(RuntimeError):
    """Setup problem that makes polling pointless (no identifiers, bad location codes...)."""


class ResponseDecodeError(ValueError):
    """The booking API answered with something that isn't the expected bundles payload."""
