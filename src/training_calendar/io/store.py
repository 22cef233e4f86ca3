"""
Storage boundary for training-calendar entities.

DataStore is the contract the services rely on: keyed get/find/insert/update,
soft-delete honoured as an implicit filter, per-row ownership checks on every
mutation and an atomic get-or-create.  Two backends are provided:

- InMemoryStore: rows held as serialized dicts (tests, embedding).
- JsonlStore: InMemoryStore persisted as one <collection>.jsonl file per
  collection under a data directory.

Rows are always stored in serialized form, so everything read back has
passed through the same round trip a real database would impose.
"""

import fcntl
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Callable, Generic, Iterator, TypeVar

from loguru import logger

from ..core.errors import NotFound, PermissionDenied, ValidationError
from .serializers import (
    coach_message_to_dict,
    dict_to_coach_message,
    dict_to_exercise_set_log,
    dict_to_motivational_quote,
    dict_to_readiness_log,
    dict_to_session_attempt,
    dict_to_session_template,
    exercise_set_log_to_dict,
    from_json_line,
    motivational_quote_to_dict,
    readiness_log_to_dict,
    session_attempt_to_dict,
    session_template_to_dict,
    to_json_line,
)

T = TypeVar("T")

SESSION_TEMPLATES = "session_templates"
SESSION_ATTEMPTS = "session_attempts"
EXERCISE_LOGS = "exercise_logs"
READINESS_LOGS = "readiness_logs"
MOTIVATIONAL_QUOTES = "motivational_quotes"
COACH_MESSAGES = "coach_messages"

DELETED_FLAG = "is_deleted"
LOCK_FILE_NAME = ".lock"


@dataclass(frozen=True)
class Collection(Generic[T]):
    """
    How one entity type is stored.

    owner_fields lists the row fields whose value may act on the row; an
    empty tuple means the collection is not owned (reference data).
    """

    name: str
    to_dict: Callable[[T], dict[str, Any]]
    from_dict: Callable[[dict[str, Any]], T]
    owner_fields: tuple[str, ...] = ()


COLLECTIONS: dict[str, Collection] = {
    c.name: c
    for c in (
        Collection(SESSION_TEMPLATES, session_template_to_dict, dict_to_session_template),
        Collection(SESSION_ATTEMPTS, session_attempt_to_dict, dict_to_session_attempt, ("athlete_id",)),
        Collection(EXERCISE_LOGS, exercise_set_log_to_dict, dict_to_exercise_set_log, ("athlete_id",)),
        Collection(READINESS_LOGS, readiness_log_to_dict, dict_to_readiness_log, ("athlete_id",)),
        Collection(MOTIVATIONAL_QUOTES, motivational_quote_to_dict, dict_to_motivational_quote),
        Collection(COACH_MESSAGES, coach_message_to_dict, dict_to_coach_message, ("coach_id", "athlete_id")),
    )
}


def get_collection(name: str) -> Collection:
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise ValueError(f"Unknown collection: {name!r}") from None


class DataStore(ABC):
    """Abstract data-access contract."""

    @abstractmethod
    def get(self, collection: str, record_id: str) -> Any:
        """
        Return one live record.

        Raises:
            NotFound: If the id is unknown or the row is soft-deleted
        """

    @abstractmethod
    def find(self, collection: str, **filters: Any) -> list[Any]:
        """Return live records whose attributes equal every filter value."""

    @abstractmethod
    def insert(self, collection: str, entity: Any, actor_id: str | None = None) -> Any:
        """Insert a new record; the actor must own it in owned collections."""

    @abstractmethod
    def update(self, collection: str, entity: Any, actor_id: str | None = None) -> Any:
        """
        Replace an existing record.

        Raises:
            NotFound: If there is no live row with entity.id
            PermissionDenied: If actor_id does not own the stored row
        """

    @abstractmethod
    def soft_delete(self, collection: str, record_id: str, actor_id: str | None = None) -> None:
        """Hide a record from every subsequent read."""

    @abstractmethod
    def get_or_create(
        self,
        collection: str,
        match: Callable[[Any], bool],
        factory: Callable[[], Any],
        actor_id: str | None = None,
    ) -> tuple[Any, bool]:
        """
        Atomically return the first live record satisfying match, or insert
        factory()'s result.

        Returns:
            (record, created)
        """


class InMemoryStore(DataStore):
    """
    Thread-safe store keeping serialized rows in memory.

    A single re-entrant lock serializes every operation, which makes
    get_or_create atomic for concurrent callers.
    """

    def __init__(self) -> None:
        self._rows: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in COLLECTIONS}
        self._lock = threading.RLock()

    # -- hooks ---------------------------------------------------------------

    @contextmanager
    def _locked(self, collection: str) -> Iterator[None]:
        """Hold exclusive access to collection for one operation."""
        with self._lock:
            yield

    def _persist(self, collection: str, rows: dict[str, dict[str, Any]]) -> None:
        """Write a collection's new rows before they replace the cached ones."""

    def _commit(self, collection: str, row: dict[str, Any]) -> None:
        rows = {**self._rows[collection], row["id"]: row}
        self._persist(collection, rows)
        self._rows[collection] = rows

    # -- helpers -------------------------------------------------------------

    def _live_row(self, collection: str, record_id: str) -> dict[str, Any]:
        row = self._rows[collection].get(record_id)
        if row is None or row.get(DELETED_FLAG):
            raise NotFound(collection, record_id)
        return row

    @staticmethod
    def _check_owner(spec: Collection, row: dict[str, Any], actor_id: str | None) -> None:
        if not spec.owner_fields or actor_id is None:
            return
        if not any(row.get(f) == actor_id for f in spec.owner_fields):
            raise PermissionDenied(spec.name, str(row.get("id")), actor_id)

    @staticmethod
    def _load(spec: Collection, row: dict[str, Any]) -> Any:
        data = {k: v for k, v in row.items() if k != DELETED_FLAG}
        return spec.from_dict(data)

    def _live_entities(self, spec: Collection) -> list[Any]:
        return [
            self._load(spec, row)
            for row in self._rows[spec.name].values()
            if not row.get(DELETED_FLAG)
        ]

    def _insert_locked(self, spec: Collection, entity: Any, actor_id: str | None) -> Any:
        row = spec.to_dict(entity)
        if row["id"] in self._rows[spec.name]:
            raise ValidationError(f"{spec.name}: duplicate id {row['id']!r}")
        self._check_owner(spec, row, actor_id)
        row[DELETED_FLAG] = False
        self._commit(spec.name, row)
        return self._load(spec, row)

    # -- DataStore -----------------------------------------------------------

    def get(self, collection: str, record_id: str) -> Any:
        spec = get_collection(collection)
        with self._locked(collection):
            return self._load(spec, self._live_row(collection, record_id))

    def find(self, collection: str, **filters: Any) -> list[Any]:
        spec = get_collection(collection)
        with self._locked(collection):
            entities = self._live_entities(spec)
        return [
            e for e in entities
            if all(getattr(e, key) == value for key, value in filters.items())
        ]

    def insert(self, collection: str, entity: Any, actor_id: str | None = None) -> Any:
        spec = get_collection(collection)
        with self._locked(collection):
            return self._insert_locked(spec, entity, actor_id)

    def update(self, collection: str, entity: Any, actor_id: str | None = None) -> Any:
        spec = get_collection(collection)
        row = spec.to_dict(entity)
        with self._locked(collection):
            stored = self._live_row(collection, row["id"])
            self._check_owner(spec, stored, actor_id)
            self._check_owner(spec, row, actor_id)
            row[DELETED_FLAG] = False
            self._commit(collection, row)
            return self._load(spec, row)

    def soft_delete(self, collection: str, record_id: str, actor_id: str | None = None) -> None:
        spec = get_collection(collection)
        with self._locked(collection):
            stored = self._live_row(collection, record_id)
            self._check_owner(spec, stored, actor_id)
            self._commit(collection, {**stored, DELETED_FLAG: True})
        logger.debug(f"[STORE] Soft-deleted {collection}/{record_id}")

    def get_or_create(
        self,
        collection: str,
        match: Callable[[Any], bool],
        factory: Callable[[], Any],
        actor_id: str | None = None,
    ) -> tuple[Any, bool]:
        spec = get_collection(collection)
        with self._locked(collection):
            for entity in self._live_entities(spec):
                if match(entity):
                    return entity, False
            return self._insert_locked(spec, factory(), actor_id), True


class JsonlStore(InMemoryStore):
    """
    InMemoryStore persisted to JSON-lines files.

    Each collection lives in <data_dir>/<collection>.jsonl, one row per line
    (soft-deleted rows included, flagged).  A mutated collection is rewritten
    through a temporary file and swapped in, so a crash never leaves a
    half-written file behind.

    Every operation re-reads its collection under an flock on the data
    directory, so several processes (or instances) sharing one directory
    never overwrite each other's rows and get_or_create stays atomic
    across them.  The lock is POSIX-only (fcntl).
    """

    def __init__(self, data_dir: str | Path):
        super().__init__()
        self.data_dir = Path(data_dir)
        for name in COLLECTIONS:
            self._rows[name] = self._read(name)

    def path_for(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.jsonl"

    def exists(self) -> bool:
        return self.data_dir.exists()

    def init(self) -> None:
        """Create the data directory and empty collection files."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for name in COLLECTIONS:
            path = self.path_for(name)
            if not path.exists():
                path.touch()
        logger.info(f"[STORE] Initialized data directory {self.data_dir}")

    def _read(self, collection: str) -> dict[str, dict[str, Any]]:
        path = self.path_for(collection)
        if not path.exists():
            return {}

        rows: dict[str, dict[str, Any]] = {}
        spec = get_collection(collection)
        with open(path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    row = from_json_line(line)
                    self._load(spec, row)
                except ValidationError as e:
                    raise ValidationError(f"Error parsing line {line_num} in {path}: {e}") from e
                rows[row["id"]] = row
        return rows

    @contextmanager
    def _locked(self, collection: str) -> Iterator[None]:
        """
        Hold the in-process lock plus an flock on <data_dir>/.lock, then
        reload collection from disk so the operation sees writes made by
        other processes or other JsonlStore instances.
        """
        with self._lock:
            if not self.data_dir.exists():
                yield
                return
            with open(self.data_dir / LOCK_FILE_NAME, "a") as lock_file:
                fcntl.flock(lock_file, fcntl.LOCK_EX)
                try:
                    self._rows[collection] = self._read(collection)
                    yield
                finally:
                    fcntl.flock(lock_file, fcntl.LOCK_UN)

    def _persist(self, collection: str, rows: dict[str, dict[str, Any]]) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.path_for(collection)
        tmp = NamedTemporaryFile("w", dir=self.data_dir, delete=False, encoding="utf-8")
        temp_path = Path(tmp.name)
        try:
            with tmp:
                for row in rows.values():
                    tmp.write(to_json_line(row) + "\n")
            temp_path.replace(path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise
