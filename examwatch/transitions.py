"""Detect offers that became bookable since the previous run.

Everything here is a pure function of its arguments: the previous snapshot is
never mutated and the current time is passed in by the caller.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Iterable

from examwatch.domain import NormalizedOffer, Offer, StateEntry, StateSnapshot


@dataclass
class TransitionResult:
    newly_bookable: list[NormalizedOffer] = field(default_factory=list)
    next_state: StateSnapshot = field(default_factory=dict)


def build_key(offer: Offer) -> str:
    """Derive the state key for an offer.

    Priority: ``offerKey``, then ``oid``, then
    ``moduleId|startDate|locationId`` with ``module``/``date``/``location``
    placeholders for missing parts. If the upstream stops sending all of the
    identifying fields, the composite may change between polls and the same
    offer will look new again.
    """
    explicit = offer.get("offerKey") or offer.get("oid")
    if explicit:
        return str(explicit)
    return "|".join(
        [
            str(offer.get("moduleId") or "module"),
            str(offer.get("startDate") or "date"),
            str(offer.get("locationId") or "location"),
        ]
    )


def is_bookable(offer: Offer) -> bool:
    link = offer.get("buttonLink")
    return bool(link and str(link).strip())


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def normalize_offer(offer: Offer) -> NormalizedOffer:
    return NormalizedOffer(
        key=build_key(offer),
        start_date=offer.get("startDate"),
        end_date=offer.get("endDate"),
        location_name=offer.get("locationName"),
        availability=offer.get("availability"),
        availability_text=offer.get("availabilityText"),
        button_link=offer.get("buttonLink"),
        price=_strip(offer.get("price")),
    )


def format_timestamp(now: dt.datetime) -> str:
    # Naive datetimes are taken as UTC.
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    return now.astimezone(dt.timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def compute_transitions(
    offers: Iterable[Offer],
    prev_state: StateSnapshot,
    now: dt.datetime,
) -> TransitionResult:
    now_iso = format_timestamp(now)
    result = TransitionResult()

    for offer in offers:
        key = build_key(offer)
        bookable = is_bookable(offer)
        # Always compare against the previous run, never against entries
        # written earlier in this loop.
        prev = prev_state.get(key)
        was_bookable = prev.bookable if prev is not None else False
        if bookable and not was_bookable:
            result.newly_bookable.append(normalize_offer(offer))
        result.next_state[key] = StateEntry(bookable=bookable, last_seen=now_iso)

    # Offers that vanished from the feed count as not bookable, so a later
    # reappearance with a link is reported again.
    for key in prev_state:
        if key not in result.next_state:
            result.next_state[key] = StateEntry(bookable=False, last_seen=now_iso)

    return result
