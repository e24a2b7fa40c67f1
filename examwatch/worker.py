from __future__ import annotations

import datetime as dt
import logging

from examwatch.config import Settings
from examwatch.offer_source import fetch_offers
from examwatch.resend_notifier import send_email
from examwatch.state_file import load_state, save_state
from examwatch.transitions import TransitionResult, compute_transitions

logger = logging.getLogger(__name__)


def run_check_once(settings: Settings, now: dt.datetime | None = None) -> TransitionResult:
    previous = load_state(settings.state_file)

    logger.info("Fetching offers...")
    offers = fetch_offers(settings)
    logger.info("Fetched %d offers", len(offers))

    if now is None:
        now = dt.datetime.now(dt.timezone.utc)
    result = compute_transitions(offers, previous, now)

    if result.newly_bookable:
        logger.info("Found %d newly bookable offers. Sending email...", len(result.newly_bookable))
        # If this raises, state is not saved and the same offers are reported next run.
        send_email(settings, result.newly_bookable)
        logger.info("Email sent.")
    else:
        logger.info("No new bookable offers detected.")

    save_state(settings.state_file, result.next_state)
    logger.info("State saved to %s", settings.state_file)
    return result
