from __future__ import annotations

import logging

import httpx

from examwatch.config import Settings
from examwatch.domain import FetchError, Offer

logger = logging.getLogger(__name__)

ENDPOINT = "https://www.goethe.de/rest/examfinder/exams/institute/O%2010000267"

# Arabic-language listing for the Amman institute, soonest first.
QUERY_PARAMS = {
    "category": "E006",
    "type": "ER",
    "countryIsoCode": "",
    "locationName": "",
    "count": "10",
    "start": "1",
    "langId": "11",
    "timezone": "37",
    "isODP": "0",
    "sortField": "startDate",
    "sortOrder": "ASC",
    "dataMode": "0",
    "langIsoCodes": "ar",
}

HEADERS = {
    "accept": "application/json, text/javascript, */*; q=0.01",
    "x-requested-with": "XMLHttpRequest",
    # No cookies: the endpoint is public.
}

MOCK_OFFERS: tuple[Offer, ...] = (
    {
        "startDate": "2026/01/31",
        "endDate": "2026/02/01",
        "locationName": "Mock Location",
        "availability": 1,
        "availabilityText": "Mock availability",
        "price": "100 JOD",
        "buttonLink": "https://example.com/book",
        "moduleId": "MOCK",
        "locationId": "MOCK_LOC",
        "offerKey": "MOCK_OFFER_1",
    },
)


def fetch_offers(settings: Settings, *, transport: httpx.BaseTransport | None = None) -> list[Offer]:
    if settings.force_mock:
        logger.info("[MOCK] Returning mocked offers (TEST_FORCE_MOCK=1)")
        return [dict(o) for o in MOCK_OFFERS]

    try:
        with httpx.Client(timeout=settings.http_timeout_seconds, transport=transport) as client:
            r = client.get(ENDPOINT, params=QUERY_PARAMS, headers=HEADERS)
    except httpx.HTTPError as e:
        raise FetchError(f"Fetch failed ({type(e).__name__}: {e})") from e

    if not r.is_success:
        raise FetchError(f"Fetch failed {r.status_code}: {r.text}", status_code=r.status_code, body=r.text)

    try:
        data = r.json()
    except ValueError as e:
        raise FetchError(f"Fetch returned non-JSON body: {e}", status_code=r.status_code, body=r.text) from e

    # Anything but {"DATA": [...]} means "no offers right now".
    offers = data.get("DATA") if isinstance(data, dict) else None
    if not isinstance(offers, list):
        return []
    return [o for o in offers if isinstance(o, dict)]
