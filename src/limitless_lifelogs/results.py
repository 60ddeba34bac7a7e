"""
Uniform success/failure results for callers of the lifelog operations.

Every failure is turned into a ``Result`` here: typed ``LifelogError``s by
class, anything unexpected as a network error. Nothing crosses this boundary.
"""

from __future__ import annotations

import enum
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, TypeVar

from .errors import (ApiError, ConfigError, InvalidParams, LifelogError, NetworkError,
                     NotFound, RequestTimeout)
from .models import LifelogRecord
from .search import SearchResult
from .util import eprint

T = TypeVar("T")


class Outcome(enum.Enum):
    SUCCESS        = "success"
    CONFIG_ERROR   = "config_error"
    INVALID_PARAMS = "invalid_params"
    NOT_FOUND      = "not_found"
    TIMEOUT        = "timeout"
    API_ERROR      = "api_error"
    NETWORK_ERROR  = "network_error"


_OUTCOMES = (
    (ConfigError, Outcome.CONFIG_ERROR),
    (InvalidParams, Outcome.INVALID_PARAMS),
    (NotFound, Outcome.NOT_FOUND),
    (RequestTimeout, Outcome.TIMEOUT),
    (ApiError, Outcome.API_ERROR),
    (NetworkError, Outcome.NETWORK_ERROR),
)


@dataclass(frozen=True)
class Result:
    outcome: Outcome
    message: str
    data: Any = None
    status: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS

    @property
    def fatal(self) -> bool:
        return self.outcome is Outcome.CONFIG_ERROR

    @classmethod
    def success(cls, message: str, data: Any=None) -> "Result":
        return cls(Outcome.SUCCESS, message, data)

    @classmethod
    def failure(cls, error: LifelogError) -> "Result":
        outcome = classify(error)
        status = getattr(error, "status", None)
        if outcome is Outcome.API_ERROR:
            message = f"Limitless API Error (Status {status if status is not None else 'N/A'}): {error}"
        else:
            message = str(error)
        return cls(outcome, message, status=status)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"ok": self.ok, "outcome": self.outcome.value, "message": self.message}
        if self.status is not None:
            out["status"] = self.status
        if self.data is not None:
            out["data"] = _jsonable(self.data)
        return out


def classify(error: LifelogError) -> Outcome:
    for error_type, outcome in _OUTCOMES:
        if isinstance(error, error_type):
            return outcome
    return Outcome.NETWORK_ERROR

def _jsonable(data: Any) -> Any:
    if isinstance(data, LifelogRecord):
        return data.to_dict()
    if isinstance(data, SearchResult):
        return {"term": data.term, "scanned": data.scanned,
                "matches": [lg.to_dict() for lg in data.matches]}
    if isinstance(data, (list, tuple)):
        return [_jsonable(item) for item in data]
    return data

def translate(call: Callable[[], T], summarize: Callable[[T], str]) -> Result:
    """Run ``call`` and always hand back a Result; nothing escapes to the caller."""
    try:
        data = call()
        return Result.success(summarize(data), data)
    except LifelogError as e:
        return Result.failure(e)
    except Exception as e:
        eprint(f"Unexpected error: {traceback.format_exc()}", True)
        return Result(Outcome.NETWORK_ERROR, f"Unexpected error: {e!r}")


# ── Summaries ────────────────────────────────────────────────────────────────
def summarize_list(records: Sequence[LifelogRecord], requested_limit: Optional[int]=None) -> str:
    n = len(records)
    if n == 0:
        return "No lifelogs found matching the criteria."
    if requested_limit is None:
        return f"Found {n} lifelogs matching the criteria."
    if n < requested_limit:
        return f"Found {n} lifelogs (requested up to {requested_limit})."
    return f"Found {n} lifelogs (limit was {requested_limit})."

def summarize_record(record: LifelogRecord) -> str:
    return f"Retrieved lifelog {record.id}."

def summarize_search(result: SearchResult, requested_limit: Optional[int]=None) -> str:
    if result.scanned == 0:
        return "No recent lifelogs found to search within."
    if not result.matches:
        return (f'No matches found for "{result.term}" within the '
                f"{result.scanned} most recent lifelogs searched.")
    text = (f'Found {len(result.matches)} match(es) for "{result.term}" within the '
            f"{result.scanned} most recent lifelogs searched")
    if requested_limit is not None:
        text += f" (displaying up to {requested_limit})"
    return text + ":"
