"""
Key-value persistence for form state and a TTL cache on top of it.

The computation core never touches storage; callers inject a StateStore.
"""
from __future__ import annotations
import json
import logging
import threading
import time
from datetime import date
from pathlib import Path
from typing import Annotated, Any, Callable, Dict, Optional, Protocol

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from workhours.config import settings

logger = logging.getLogger(__name__)

FORM_STATE_KEY = "workHours_formState"


class StateStore(Protocol):
    def load(self, key: str) -> Optional[Any]: ...
    def save(self, key: str, value: Any) -> None: ...
    def delete(self, key: str) -> None: ...
    def keys(self) -> list[str]: ...


class MemoryStore:
    """In-process store, mainly for tests."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JSONFileStore:
    """
    All keys in one JSON document on disk, rewritten on every save.
    An unreadable file is treated as empty.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self.path)

    def load(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._read().get(key)

    def save(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._read())


# Form state

def default_billing_period(today: Optional[date] = None) -> tuple[date, date]:
    """24th of last month through 25th of this month."""
    today = today or date.today()
    if today.month == 1:
        start = date(today.year - 1, 12, 24)
    else:
        start = date(today.year, today.month - 1, 24)
    return start, date(today.year, today.month, 25)


def _rate_text(value: Any) -> Any:
    """Accept a number for the hourly rate and keep it as the form text."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


RateText = Annotated[str, BeforeValidator(_rate_text)]


class FormState(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    wh_total: str = "100 hrs 0 mins"
    wh_completed: str = "0 hrs 0 mins"
    wh_start: str = ""
    wh_end: str = ""
    wh_sun: bool = False
    wh_sat: bool = False
    wh_exclude_today: bool = False
    hourly_rate: RateText = ""
    csv_required: str = ""
    ts_input: str = ""
    ts_output: str = "Total time will appear here"


def default_form_state(today: Optional[date] = None) -> FormState:
    start, end = default_billing_period(today)
    return FormState(
        wh_start=start.isoformat(),
        wh_end=end.isoformat(),
        hourly_rate=settings.DEFAULT_HOURLY_RATE,
    )


def has_saved_state(store: StateStore) -> bool:
    return store.load(FORM_STATE_KEY) is not None


def load_form_state(store: StateStore, today: Optional[date] = None) -> FormState:
    saved = store.load(FORM_STATE_KEY)
    if saved is None:
        return default_form_state(today)
    try:
        return FormState.model_validate(saved)
    except PydanticValidationError as e:
        logger.warning(f"Stored form state is invalid, using defaults: {e}")
        return default_form_state(today)


def save_form_state(store: StateStore, partial: Dict[str, Any]) -> FormState:
    """Merge a partial update into the stored state and persist the result."""
    aliases = {name: field.alias or name for name, field in FormState.model_fields.items()}
    update = {aliases.get(k, k): v for k, v in partial.items()}
    existing = load_form_state(store).model_dump(by_alias=True)
    merged = FormState.model_validate({**existing, **update})
    store.save(FORM_STATE_KEY, merged.model_dump(by_alias=True))
    return merged


def clear_form_state(store: StateStore) -> None:
    store.delete(FORM_STATE_KEY)


# Cache

class TTLCache:
    """
    Values with an expiry timestamp, kept in a StateStore under a key prefix.
    Expired entries are removed on read.
    """

    def __init__(
        self,
        store: StateStore,
        prefix: str = "cache_",
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.prefix = prefix
        self.clock = clock

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Optional[Any]:
        entry = self.store.load(self._key(key))
        if not isinstance(entry, dict) or "expires_at" not in entry:
            return None
        if self.clock() >= entry["expires_at"]:
            self.store.delete(self._key(key))
            return None
        return entry.get("value")

    def set(self, key: str, value: Any, ttl_minutes: float) -> None:
        self.store.save(
            self._key(key),
            {"value": value, "expires_at": self.clock() + ttl_minutes * 60},
        )

    def clear(self) -> None:
        for key in self.store.keys():
            if key.startswith(self.prefix):
                self.store.delete(key)
