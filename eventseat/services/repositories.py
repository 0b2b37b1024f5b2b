"""
Repository layer abstracting storage (in-memory, JSON file, SQLAlchemy).

Every backend implements ``GuestStore``. One store is built per process by
``build_store`` and handed to the request handlers.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from eventseat.core.config import Settings, settings as default_settings
from eventseat.schemas.event import EventResponse
from eventseat.schemas.guest import GuestResponse
from eventseat.services import search_service
from eventseat.services.search_service import SearchPolicy

logger = logging.getLogger(__name__)

EVENT_FIELDS = ("name", "date", "theme_color", "logo")
GUEST_FIELDS = ("name", "table_number", "seat_number")


class StorageError(Exception):
    """Raised when the backing storage cannot be read or written"""


def new_id(taken=()) -> str:
    """Generate an opaque id not present in ``taken``"""
    candidate = str(uuid.uuid4())
    while candidate in taken:
        candidate = str(uuid.uuid4())
    return candidate


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GuestStore(ABC):
    """Storage contract for events and their guests"""

    def __init__(self, search_policy: Optional[SearchPolicy] = None):
        self.search_policy = search_policy or SearchPolicy()

    @abstractmethod
    def create_event(self, name: str, date: str, theme_color: Optional[str] = None,
                     logo: Optional[str] = None) -> EventResponse:
        ...

    @abstractmethod
    def get_event(self, event_id: str) -> Optional[EventResponse]:
        ...

    @abstractmethod
    def get_all_events(self) -> List[EventResponse]:
        ...

    @abstractmethod
    def update_event(self, event_id: str, **changes: Any) -> Optional[EventResponse]:
        ...

    @abstractmethod
    def add_guest(self, event_id: str, name: str, table_number: int,
                  seat_number: Optional[str] = None) -> Optional[GuestResponse]:
        ...

    @abstractmethod
    def update_guest(self, event_id: str, guest_id: str, **changes: Any) -> Optional[GuestResponse]:
        ...

    @abstractmethod
    def delete_guest(self, event_id: str, guest_id: str) -> bool:
        ...

    def search_guests(self, event_id: str, term: str) -> List[GuestResponse]:
        """Guests of ``event_id`` whose name matches ``term``, most relevant first"""
        event = self.get_event(event_id)
        if event is None:
            return []
        return search_service.search(event.guests, term, self.search_policy)


def _pick(changes: Dict[str, Any], allowed) -> Dict[str, Any]:
    unknown = set(changes) - set(allowed)
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    return changes


# -------- List-backed stores (memory, JSON file) --------

class _ListBackedStore(GuestStore):
    """Operations over a list of events; subclasses decide where the list lives"""

    @abstractmethod
    def _transaction(self, write: bool) -> Iterator[List[EventResponse]]:
        """Context manager yielding the event list; persists it afterwards when ``write``"""

    @staticmethod
    def _find(events: List[EventResponse], event_id: str) -> Optional[EventResponse]:
        return next((event for event in events if event.id == event_id), None)

    def create_event(self, name, date, theme_color=None, logo=None):
        with self._transaction(write=True) as events:
            event = EventResponse(
                id=new_id({e.id for e in events}),
                name=name,
                date=date,
                theme_color=theme_color,
                logo=logo,
                guests=[],
                created_at=utcnow(),
            )
            events.append(event)
            return event.model_copy(deep=True)

    def get_event(self, event_id):
        with self._transaction(write=False) as events:
            event = self._find(events, event_id)
            return event.model_copy(deep=True) if event else None

    def get_all_events(self):
        with self._transaction(write=False) as events:
            return [event.model_copy(deep=True) for event in events]

    def update_event(self, event_id, **changes):
        changes = _pick(changes, EVENT_FIELDS)
        with self._transaction(write=True) as events:
            event = self._find(events, event_id)
            if not event:
                return None
            for field, value in changes.items():
                setattr(event, field, value)
            return event.model_copy(deep=True)

    def add_guest(self, event_id, name, table_number, seat_number=None):
        with self._transaction(write=True) as events:
            event = self._find(events, event_id)
            if not event:
                return None
            guest = GuestResponse(
                id=new_id({g.id for g in event.guests}),
                name=name,
                table_number=table_number,
                seat_number=seat_number,
            )
            event.guests.append(guest)
            return guest.model_copy()

    def update_guest(self, event_id, guest_id, **changes):
        changes = _pick(changes, GUEST_FIELDS)
        with self._transaction(write=True) as events:
            event = self._find(events, event_id)
            if not event:
                return None
            guest = next((g for g in event.guests if g.id == guest_id), None)
            if not guest:
                return None
            for field, value in changes.items():
                setattr(guest, field, value)
            return guest.model_copy()

    def delete_guest(self, event_id, guest_id):
        with self._transaction(write=True) as events:
            event = self._find(events, event_id)
            if not event:
                return False
            remaining = [g for g in event.guests if g.id != guest_id]
            if len(remaining) == len(event.guests):
                return False
            event.guests = remaining
            return True


class InMemoryGuestStore(_ListBackedStore):
    """Process-local storage; everything is lost on restart"""

    def __init__(self, search_policy: Optional[SearchPolicy] = None):
        super().__init__(search_policy)
        self._events: List[EventResponse] = []
        self._lock = threading.RLock()

    @contextmanager
    def _transaction(self, write):
        with self._lock:
            yield self._events


class JsonFileGuestStore(_ListBackedStore):
    """Single JSON document holding every event, re-read before each operation.

    Each read-modify-write runs under an in-process lock and, where the
    platform has ``fcntl``, an exclusive ``flock`` on ``<file>.lock``; the
    document is replaced atomically.
    """

    def __init__(self, path, search_policy: Optional[SearchPolicy] = None):
        super().__init__(search_policy)
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self._lock = threading.RLock()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _file_lock(self):
        with self._lock:
            try:
                import fcntl
            except ImportError:
                # No flock on this platform; the in-process lock still serializes this worker
                yield
                return
            with open(self.lock_path, "a") as fh:
                fcntl.flock(fh.fileno(), fcntl.LOCK_EX)
                try:
                    yield
                finally:
                    fcntl.flock(fh.fileno(), fcntl.LOCK_UN)

    def _load(self) -> List[EventResponse]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return [EventResponse.model_validate(item) for item in raw]
        except (OSError, ValueError, TypeError, ValidationError) as e:
            logger.error("Error loading events from %s: %s", self.path, e)
            raise StorageError(f"Could not read {self.path}") from e

    def _save(self, events: List[EventResponse]) -> None:
        payload = [event.model_dump(mode="json", by_alias=True, exclude_none=True) for event in events]
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.path.parent, prefix=".events-", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                json.dump(payload, tmp, indent=2)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error("Error saving events to %s: %s", self.path, e)
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Could not write {self.path}") from e

    @contextmanager
    def _transaction(self, write):
        with self._file_lock():
            events = self._load()
            yield events
            if write:
                self._save(events)


# -------- SQLAlchemy store --------

class SqlGuestStore(GuestStore):
    """Relational storage; each operation runs in its own transaction"""

    def __init__(self, session_factory, search_policy: Optional[SearchPolicy] = None):
        super().__init__(search_policy)
        self._session_factory = session_factory

    @contextmanager
    def _session(self):
        db = self._session_factory()
        try:
            yield db
            db.commit()
        except (SQLAlchemyError, OverflowError) as e:
            db.rollback()
            logger.error("Database error: %s", e)
            raise StorageError("Database operation failed") from e
        finally:
            db.close()

    @staticmethod
    def _guest_out(row) -> GuestResponse:
        return GuestResponse(
            id=row.id,
            name=row.name,
            table_number=row.table_number,
            seat_number=row.seat_number,
        )

    @classmethod
    def _event_out(cls, row) -> EventResponse:
        created_at = row.created_at
        # SQLite drops tzinfo on the way back
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return EventResponse(
            id=row.id,
            name=row.name,
            date=row.date,
            theme_color=row.theme_color,
            logo=row.logo,
            guests=[cls._guest_out(g) for g in row.guests],
            created_at=created_at,
        )

    @staticmethod
    def _event_row(db, event_id: str):
        from eventseat.models import Event
        return db.query(Event).filter(Event.id == event_id).first()

    @staticmethod
    def _guest_row(db, event_row, guest_id: str):
        from eventseat.models import Guest
        return db.query(Guest).filter(Guest.event_pk == event_row.pk, Guest.id == guest_id).first()

    def create_event(self, name, date, theme_color=None, logo=None):
        from eventseat.models import Event
        with self._session() as db:
            event_id = new_id()
            while self._event_row(db, event_id):
                event_id = new_id()
            event = Event(
                id=event_id,
                name=name,
                date=date,
                theme_color=theme_color,
                logo=logo,
                created_at=utcnow(),
            )
            db.add(event)
            db.flush()
            return self._event_out(event)

    def get_event(self, event_id):
        with self._session() as db:
            event = self._event_row(db, event_id)
            return self._event_out(event) if event else None

    def get_all_events(self):
        from eventseat.models import Event
        with self._session() as db:
            return [self._event_out(e) for e in db.query(Event).order_by(Event.pk).all()]

    def update_event(self, event_id, **changes):
        changes = _pick(changes, EVENT_FIELDS)
        with self._session() as db:
            event = self._event_row(db, event_id)
            if not event:
                return None
            for field, value in changes.items():
                setattr(event, field, value)
            db.flush()
            return self._event_out(event)

    def add_guest(self, event_id, name, table_number, seat_number=None):
        from eventseat.models import Guest
        with self._session() as db:
            event = self._event_row(db, event_id)
            if not event:
                return None
            guest = Guest(
                id=new_id({g.id for g in event.guests}),
                event_pk=event.pk,
                name=name,
                table_number=table_number,
                seat_number=seat_number,
            )
            db.add(guest)
            db.flush()
            return self._guest_out(guest)

    def update_guest(self, event_id, guest_id, **changes):
        changes = _pick(changes, GUEST_FIELDS)
        with self._session() as db:
            event = self._event_row(db, event_id)
            if not event:
                return None
            guest = self._guest_row(db, event, guest_id)
            if not guest:
                return None
            for field, value in changes.items():
                setattr(guest, field, value)
            db.flush()
            return self._guest_out(guest)

    def delete_guest(self, event_id, guest_id):
        with self._session() as db:
            event = self._event_row(db, event_id)
            if not event:
                return False
            guest = self._guest_row(db, event, guest_id)
            if not guest:
                return False
            db.delete(guest)
            return True


def build_store(config: Settings = default_settings) -> GuestStore:
    """Create the store selected by ``STORAGE_BACKEND``"""
    policy = SearchPolicy(fuzzy=config.SEARCH_FUZZY, empty_query=config.SEARCH_EMPTY_QUERY.lower())
    backend = config.STORAGE_BACKEND.lower()

    if backend == "memory":
        logger.warning("Using in-memory storage - data will reset on restart")
        return InMemoryGuestStore(policy)
    if backend == "file":
        logger.info("Using JSON file storage at %s", config.DATA_FILE)
        return JsonFileGuestStore(config.DATA_FILE, policy)
    if backend == "sql":
        from eventseat.core.db import make_session_factory
        logger.info("Using SQL storage at %s", config.DATABASE_URL)
        return SqlGuestStore(make_session_factory(config.DATABASE_URL), policy)

    raise ValueError(f"Unknown STORAGE_BACKEND: {config.STORAGE_BACKEND!r}")
