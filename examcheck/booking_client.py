from __future__ import annotations

import json
import logging
from typing import Any, Sequence

import httpx

from examcheck.domain import Bundle, Occasion, ResponseDecodeError

logger = logging.getLogger(__name__)

BOOKING_URL = "https://fp.trafikverket.se/boka/occasion-bundles"

USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64; rv:109.0) Gecko/20100101 Firefox/116.0"

START_DATE = "1970-01-01T00:00:00.000Z"

# Motorcycle licence driving test; none of these vary at runtime.
LICENCE_ID = 4
LANGUAGE_ID = 13
VEHICLE_TYPE_ID = 1
TACHOGRAPH_TYPE_ID = 1
OCCASION_CHOICE_ID = 1
EXAMINATION_TYPE_ID = 10


def build_request(identifier: str, location_id: int, nearby_location_ids: Sequence[int]) -> dict[str, Any]:
    return {
        "bookingSession": {
            "socialSecurityNumber": identifier,
            "licenceId": LICENCE_ID,
            "bookingModeId": 0,
            "ignoreDebt": False,
            # Lets the search run even after a licence has been granted.
            "ignoreBookingHindrance": True,
            "examinationTypeId": 0,
            "excludeExaminationCategories": [],
            "rescheduleTypeId": 0,
            "paymentIsActive": False,
            "paymentReference": None,
            "paymentUrl": None,
            "searchedMonths": 0,
        },
        "occasionBundleQuery": {
            "startDate": START_DATE,
            "searchedMonths": 0,
            "locationId": location_id,
            # No nearby locations is sent as null, not [].
            "nearbyLocationIds": list(nearby_location_ids) or None,
            "languageId": LANGUAGE_ID,
            "vehicleTypeId": VEHICLE_TYPE_ID,
            "tachographTypeId": TACHOGRAPH_TYPE_ID,
            "occasionChoiceId": OCCASION_CHOICE_ID,
            "examinationTypeId": EXAMINATION_TYPE_ID,
        },
    }


def _string_field(raw: dict[str, Any], name: str) -> str:
    value = raw.get(name)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ResponseDecodeError(f"Occasion field {name!r} must be a string, got {type(value).__name__}")
    return value


def _parse_occasion(raw: Any) -> Occasion:
    if not isinstance(raw, dict):
        raise ResponseDecodeError(f"Occasion must be an object, got {type(raw).__name__}")
    return Occasion(
        date=_string_field(raw, "date"),
        time=_string_field(raw, "time"),
        location_name=_string_field(raw, "locationName"),
    )


def _parse_bundle(raw: Any) -> Bundle:
    if not isinstance(raw, dict):
        raise ResponseDecodeError(f"Bundle must be an object, got {type(raw).__name__}")
    occasions_raw = raw.get("occasions")
    if occasions_raw is None:
        return Bundle()
    if not isinstance(occasions_raw, list):
        raise ResponseDecodeError(f"'occasions' must be a list, got {type(occasions_raw).__name__}")
    return Bundle(occasions=tuple(_parse_occasion(o) for o in occasions_raw))


def parse_bundles(payload: Any) -> list[Bundle]:
    # A bare JSON null decodes as "no bundles".
    if payload is None:
        return []
    if not isinstance(payload, dict):
        raise ResponseDecodeError(f"Response must be a JSON object, got {type(payload).__name__}")
    bundles_raw = payload.get("bundles")
    if bundles_raw is None:
        return []
    if not isinstance(bundles_raw, list):
        raise ResponseDecodeError(f"'bundles' must be a list, got {type(bundles_raw).__name__}")
    return [_parse_bundle(b) for b in bundles_raw]


def format_occasions(bundles: Sequence[Bundle]) -> str:
    # Only the first bundle (the primary search window) is reported.
    if not bundles:
        return ""
    return "\n".join(o.describe() for o in bundles[0].occasions)


def fetch_occasions(
    identifier: str,
    location_id: int,
    nearby_location_ids: Sequence[int],
    *,
    url: str = BOOKING_URL,
    verify_tls: bool = False,
    timeout_seconds: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> str:
    """Ask the booking API for open occasions and return them as a message.

    An empty string means nothing was found. Network failures are raised as
    ``httpx.HTTPError``; an undecodable body as ``ResponseDecodeError``.
    """
    body = json.dumps(build_request(identifier, location_id, nearby_location_ids), indent=2)
    headers = {
        "User-Agent": USER_AGENT,
        "Content-Type": "application/json",
    }

    with httpx.Client(verify=verify_tls, timeout=timeout_seconds, transport=transport) as client:
        r = client.post(url, content=body.encode("utf-8"), headers=headers)

    # Status is informational only; the body is decoded either way.
    logger.info("HTTP: %s %s", r.status_code, r.reason_phrase)

    try:
        payload = r.json()
    except ValueError as e:
        raise ResponseDecodeError(f"Booking API returned non-JSON body (HTTP {r.status_code})") from e

    return format_occasions(parse_bundles(payload))
