from __future__ import annotations

import html
from typing import Sequence

import httpx

from examwatch.config import Settings
from examwatch.domain import ConfigError, NormalizedOffer, NotifyError

RESEND_URL = "https://api.resend.com/emails"
SUBJECT = "Goethe exam slot available"
FOOTER = "This alert was generated automatically."


def parse_recipients(raw: str) -> list[str]:
    # ALERT_RECIPIENTS is a comma-separated list:
    #   ALERT_RECIPIENTS=a@x.com, b@y.com
    parts = [p.strip() for p in raw.split(",")]
    recipients = [p for p in parts if p]
    if not recipients:
        raise ConfigError("ALERT_RECIPIENTS yielded no recipients after parsing")
    return recipients


def _price(o: NormalizedOffer) -> object:
    return "n/a" if o.price is None else o.price


def _text_block(o: NormalizedOffer) -> str:
    return "\n".join(
        [
            f"Date: {o.start_date} → {o.end_date}",
            f"Location: {o.location_name}",
            f"Availability: {o.availability} ({o.availability_text})",
            f"Price: {_price(o)}",
            f"Book: {o.button_link}",
        ]
    )


def _html_block(o: NormalizedOffer) -> str:
    def e(value: object) -> str:
        return html.escape(str(value))

    return (
        '<div style="margin-bottom:12px;padding:8px;border:1px solid #ddd;border-radius:6px;">\n'
        f"  <div><strong>Date:</strong> {e(o.start_date)} → {e(o.end_date)}</div>\n"
        f"  <div><strong>Location:</strong> {e(o.location_name)}</div>\n"
        f"  <div><strong>Availability:</strong> {e(o.availability)} ({e(o.availability_text)})</div>\n"
        f"  <div><strong>Price:</strong> {e(_price(o))}</div>\n"
        f'  <div><strong>Book:</strong> <a href="{e(o.button_link)}">{e(o.button_link)}</a></div>\n'
        "</div>"
    )


def format_email_body(new_offers: Sequence[NormalizedOffer]) -> tuple[str, str]:
    """Render the alert as (plain text, HTML)."""
    blocks = "\n\n".join(_text_block(o) for o in new_offers)
    text = f"New Goethe exam availability detected:\n\n{blocks}\n\n{FOOTER}"

    html_body = "\n".join(
        [
            "<h3>New Goethe exam availability detected</h3>",
            *[_html_block(o) for o in new_offers],
            f'<div style="color:#666;font-size:12px;">{FOOTER}</div>',
        ]
    )
    return text, html_body


def send_email(
    settings: Settings,
    new_offers: Sequence[NormalizedOffer],
    *,
    transport: httpx.BaseTransport | None = None,
) -> None:
    if not new_offers:
        return

    recipients = parse_recipients(settings.alert_recipients)
    text, html_body = format_email_body(new_offers)
    payload = {
        "from": settings.alert_from,
        "to": recipients,
        "subject": SUBJECT,
        "text": text,
        "html": html_body,
    }
    headers = {"Authorization": f"Bearer {settings.resend_api_key}"}

    try:
        with httpx.Client(timeout=settings.http_timeout_seconds, transport=transport) as client:
            r = client.post(RESEND_URL, json=payload, headers=headers)
    except httpx.HTTPError as e:
        raise NotifyError(f"Resend request failed ({type(e).__name__}: {e})") from e

    if not r.is_success:
        raise NotifyError(f"Resend error {r.status_code}: {r.text}", status_code=r.status_code, body=r.text)
