"""
Ledger Store

Typed access to named slots of the key-value store. A slot holds either
a JSON array of records or a single JSON object.

DESIGN DECISION: `set` always rewrites the whole slot. There is no
partial merge and no transaction; the last writer wins.

Reads never fail on bad data. An absent key, unparseable JSON, a payload
of the wrong shape or an individual record that no longer validates is
logged and read as "nothing there". Writes that name their model carry
skipped records over untouched, so a newer or older record shape
survives a round trip through code that cannot read it.
"""

import json
from typing import AbstractSet, Any, Optional, Sequence, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from finledger.services.storage.interface import KeyValueStorageInterface


T = TypeVar("T", bound=BaseModel)

# Storage keys
USERS_KEY = "users"
CURRENT_USER_KEY = "currentUser"
EXPENSES = "expenses"
INCOMES = "incomes"
GOALS = "goals"
ACCOUNTS = "accounts"
FAMILY_MEMBERS_KEY = "family-members"
FAMILY_TASKS_KEY = "family-tasks"
FAMILY_GOALS_KEY = "family-goals"
AUDIT_LOG_KEY = "audit-log"
NOTIFICATIONS = "user-notifications"


def scoped_key(name: str, user_id: Optional[str] = None) -> str:
    """
    Build the storage key for a logical slot.

    scoped_key("accounts", "u1") -> "accounts_u1"
    scoped_key("users")          -> "users"
    """
    if not user_id:
        return name
    return f"{name}_{user_id}"


class LedgerStore:
    """
    Serializes pydantic models in and out of a key-value backend.

    One shared instance backs every repository. A session may keep its
    login in a private instance over its own backend.
    """

    def __init__(self, storage: KeyValueStorageInterface):
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    @property
    def storage(self) -> KeyValueStorageInterface:
        return self._storage

    def _load_json(self, key: str):
        raw = self._storage.get_item(key)
        if raw is None or raw == "":
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            self._logger.warning(
                "storage_payload_invalid",
                key=key,
                error=str(e),
            )
            return None

    def get(self, key: str, model: type[T]) -> list[T]:
        """
        Read every record stored under a key.

        Returns an empty list for absent or unreadable slots. Records
        that fail validation are skipped.
        """
        payload = self._load_json(key)
        if payload is None:
            return []
        if not isinstance(payload, list):
            self._logger.warning(
                "storage_payload_invalid",
                key=key,
                error=f"expected a list, found {type(payload).__name__}",
            )
            return []

        records = []
        for position, item in enumerate(payload):
            try:
                records.append(model.model_validate(item))
            except ValidationError as e:
                self._logger.warning(
                    "storage_record_skipped",
                    key=key,
                    position=position,
                    error_count=e.error_count(),
                )
        return records

    def unreadable(self, key: str, model: type[BaseModel]) -> list[Any]:
        """Raw items under a key that do not validate as `model`."""
        payload = self._load_json(key)
        if not isinstance(payload, list):
            return []

        items = []
        for item in payload:
            try:
                model.model_validate(item)
            except ValidationError:
                items.append(item)
        return items

    def set(
        self,
        key: str,
        records: Sequence[BaseModel],
        model: Optional[type[BaseModel]] = None,
    ) -> None:
        """
        Overwrite a slot with the given records.

        With a model, stored items that do not validate against it are
        written back unchanged after the records, so a write never
        destroys data that `get` had to skip.
        """
        payload = [record.model_dump(mode="json") for record in records]
        if model is not None:
            kept = self.unreadable(key, model)
            if kept:
                self._logger.info(
                    "storage_unreadable_records_kept",
                    key=key,
                    count=len(kept),
                )
                payload.extend(kept)
        self._storage.set_item(key, json.dumps(payload))

    def get_object(self, key: str, model: type[T]) -> Optional[T]:
        """Read a single object, or None if absent or unreadable."""
        payload = self._load_json(key)
        if payload is None:
            return None
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            self._logger.warning(
                "storage_payload_invalid",
                key=key,
                error=str(e),
            )
            return None

    def set_object(
        self,
        key: str,
        obj: BaseModel,
        exclude: Optional[AbstractSet[str]] = None,
    ) -> None:
        """Overwrite a slot with a single object."""
        payload = obj.model_dump(mode="json", exclude=exclude)
        self._storage.set_item(key, json.dumps(payload))

    def remove(self, key: str) -> bool:
        return self._storage.remove_item(key)
