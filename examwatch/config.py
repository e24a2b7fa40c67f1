from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from examwatch.domain import ConfigError

# state.json lives next to the package unless STATE_FILE says otherwise.
DEFAULT_STATE_FILE = str(Path(__file__).resolve().parent / "state.json")

_REQUIRED = ("RESEND_API_KEY", "ALERT_FROM", "ALERT_RECIPIENTS")


@dataclass(frozen=True)
class Settings:
    resend_api_key: str
    alert_from: str
    # Raw comma-separated list; parsed by the notifier right before sending.
    alert_recipients: str
    force_mock: bool = False
    # Where we store last known bookability per offer
    state_file: str = DEFAULT_STATE_FILE
    http_timeout_seconds: float = 20.0


def _flag(name: str) -> bool:
    return os.getenv(name, "").strip() == "1"


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Prefer .env in repo root; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    # Report every missing variable at once, not just the first one.
    missing = [name for name in _REQUIRED if not (os.getenv(name) or "").strip()]
    if missing:
        raise ConfigError(f"Missing required env vars: {', '.join(missing)}")

    timeout_raw = os.getenv("HTTP_TIMEOUT_SECONDS", "20")
    try:
        http_timeout_seconds = float(timeout_raw)
    except ValueError as e:
        raise ConfigError(f"Invalid HTTP_TIMEOUT_SECONDS value: {timeout_raw!r}") from e
    if http_timeout_seconds <= 0:
        raise ConfigError("HTTP_TIMEOUT_SECONDS must be > 0")

    return Settings(
        resend_api_key=os.environ["RESEND_API_KEY"],
        alert_from=os.environ["ALERT_FROM"],
        alert_recipients=os.environ["ALERT_RECIPIENTS"],
        force_mock=_flag("TEST_FORCE_MOCK"),
        state_file=os.getenv("STATE_FILE") or DEFAULT_STATE_FILE,
        http_timeout_seconds=http_timeout_seconds,
    )
