from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

# Raw record from the exam-finder "DATA" array. We only read from it.
Offer = Mapping[str, Any]


@dataclass(frozen=True)
class NormalizedOffer:
    """The part of an offer we keep for the notification email."""

    key: str
    start_date: Any
    end_date: Any
    location_name: Any
    availability: Any
    availability_text: Any
    button_link: Any
    price: Any


@dataclass(frozen=True)
class StateEntry:
    bookable: bool
    last_seen: str  # ISO-8601 UTC, e.g. 2026-01-31T10:00:00.000Z

    def to_dict(self) -> dict[str, Any]:
        return {"bookable": self.bookable, "lastSeen": self.last_seen}


StateSnapshot = dict[str, StateEntry]


class ExamWatchError(RuntimeError):
    pass


class ConfigError(ExamWatchError):
    """Missing or invalid configuration. Fatal, nothing is retried."""


class _HttpError(ExamWatchError):
    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class FetchError(_HttpError):
    """The exam-finder API failed or returned something that is not JSON."""


class NotifyError(_HttpError):
    """The email API rejected the message or could not be reached."""


class StateLoadError(ExamWatchError):
    """State file exists but can't be used. Never escapes load_state()."""


class StateSaveError(ExamWatchError):
    pass
