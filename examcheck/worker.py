from __future__ import annotations

import logging
import random
import time
from typing import Sequence

from examcheck.booking_client import fetch_occasions
from examcheck.config import Settings
from examcheck.identifiers import read_identifiers
from examcheck.ntfy_notifier import send_ntfy_message

logger = logging.getLogger(__name__)


def _check(settings: Settings, identifier: str) -> str:
    return fetch_occasions(
        identifier,
        settings.location_id,
        settings.nearby_location_ids,
        url=settings.booking_url,
        verify_tls=settings.verify_tls,
        timeout_seconds=settings.request_timeout_seconds,
    )


def _notify(settings: Settings, message: str) -> None:
    logger.info("Found occasions:\n%s", message)
    send_ntfy_message(topic=settings.ntfy_topic, text=message, base_url=settings.ntfy_base_url)


def run_check_once(
    settings: Settings,
    identifiers: Sequence[str] | None = None,
    *,
    rng: random.Random | None = None,
) -> str:
    """Run one check for a randomly picked identifier and push any hits.

    Returns the notification text, empty when nothing was found. Errors from
    reading identifiers or from the booking API are not caught here.
    """
    if identifiers is None:
        identifiers = read_identifiers(settings.identifiers_file)

    identifier = (rng or random).choice(identifiers)
    message = _check(settings, identifier)
    if message:
        _notify(settings, message)
    return message


def run_forever(settings: Settings) -> None:
    logger.info(
        "Worker started. Interval=%ss location=%s nearby=%s topic=%s",
        settings.check_interval_seconds,
        settings.location_id,
        list(settings.nearby_location_ids),
        settings.ntfy_topic,
    )

    last_status: float | None = None
    checks = 0
    while True:
        identifiers = read_identifiers(settings.identifiers_file)
        message = run_check_once(settings, identifiers)
        checks += 1

        if message:
            # Give the slots time to be taken (or booked) before asking again.
            time.sleep(settings.notify_cooldown_seconds)

        now = time.monotonic()
        if last_status is None or now - last_status > settings.status_log_interval_seconds:
            last_status = now
            logger.info("Checked %d times, using %d identifiers", checks, len(identifiers))

        time.sleep(settings.check_interval_seconds)
