"""
Collection Repository

CRUD over one slot of the LedgerStore. Every operation reads the full
collection, changes it in memory and writes it back wholesale.
"""

from typing import Any, Generic, Optional, TypeVar

from finledger.audit import AuditLogger
from finledger.models.audit import AuditEventBuilder
from finledger.models.ledger import LedgerModel, new_id
from finledger.services.storage import LedgerStore, NotFoundError


T = TypeVar("T", bound=LedgerModel)

# Fields a partial update may never touch
IMMUTABLE_FIELDS = frozenset({"id"})


class CollectionRepository(Generic[T]):
    """
    A set of records keyed by `id`, stored as one JSON array.

    Insertion order is preserved for display; it carries no meaning.
    """

    def __init__(
        self,
        store: LedgerStore,
        key: str,
        model: type[T],
        entity_type: str,
        audit_logger: Optional[AuditLogger] = None,
        user_id: Optional[str] = None,
    ):
        self._store = store
        self._key = key
        self._model = model
        self._entity_type = entity_type
        self._audit_logger = audit_logger
        self._user_id = user_id

    @property
    def key(self) -> str:
        return self._key

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def list_records(self) -> list[T]:
        return self._store.get(self._key, self._model)

    def get(self, record_id: str) -> Optional[T]:
        for record in self.list_records():
            if record.id == record_id:
                return record
        return None

    def save_all(self, records: list[T]) -> None:
        """Overwrite the whole collection."""
        self._store.set(self._key, records, model=self._model)

    def add(self, record: T) -> T:
        """
        Append a record.

        A record whose id is already taken is stored under a fresh id,
        so ids stay unique. Returns the record as stored.
        """
        records = self.list_records()
        taken = {r.id for r in records}
        if record.id in taken:
            record = record.model_copy(update={"id": new_id()})
        records.append(record)
        self.save_all(records)
        self._audit(AuditEventBuilder.record_created(
            self._entity_type, record.id, self._user_id,
        ))
        return record

    def replace(self, record: T) -> T:
        """
        Replace the record with the same id.

        Raises:
            NotFoundError: If no record has that id
        """
        records = self.list_records()
        for idx, existing in enumerate(records):
            if existing.id == record.id:
                records[idx] = record
                self.save_all(records)
                self._audit(AuditEventBuilder.record_updated(
                    self._entity_type, record.id, self._user_id,
                ))
                return record
        raise NotFoundError(f"{self._entity_type} not found: {record.id}")

    def update(self, record_id: str, **changes: Any) -> T:
        """
        Merge field changes into a record, revalidating the result.

        Raises:
            NotFoundError: If no record has that id
            ValueError: If an immutable field is changed or the result is invalid
        """
        forbidden = IMMUTABLE_FIELDS.intersection(changes)
        if forbidden:
            raise ValueError(f"Cannot change {', '.join(sorted(forbidden))}")

        existing = self.get(record_id)
        if existing is None:
            raise NotFoundError(f"{self._entity_type} not found: {record_id}")

        merged = self._model.model_validate({**existing.model_dump(), **changes})
        return self.replace(merged)

    def remove(self, record_id: str) -> bool:
        """
        Remove a record by id.

        Removing an unknown id changes nothing and returns False.
        """
        records = self.list_records()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            return False
        self.save_all(remaining)
        self._audit(AuditEventBuilder.record_deleted(
            self._entity_type, record_id, self._user_id,
        ))
        return True
