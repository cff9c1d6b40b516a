"""
Application Wiring for FinLedger

This module ties together all the components:
1. Storage backend (memory, JSON files or Google Sheets)
2. Typed ledger store and audit trail
3. Per-client sessions, per-user ledgers and inboxes, and the family hub

DESIGN DECISION: Everything the UI touches is built here, once.
The UI never constructs storage or repositories itself, so every
write goes through the same audited code paths.
"""

from typing import Optional

import structlog

from finledger.audit import AuditLogger, configure_logging
from finledger.auth import SessionStore
from finledger.config import StorageBackend, get_settings
from finledger.family import FamilyHub
from finledger.ledger import PersonalLedger
from finledger.notifications import NotificationInbox
from finledger.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsStorage,
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    LedgerStore,
)


logger = structlog.get_logger("finledger.orchestrator")

# About 330 characters per serialized event against a 50,000 character cell
SHEETS_MAX_AUDIT_EVENTS = 100


def create_storage(backend: Optional[StorageBackend] = None) -> KeyValueStorageInterface:
    """
    Build the configured key-value backend.

    Args:
        backend: Override the backend named in settings.
    """
    settings = get_settings()
    backend = StorageBackend(backend or settings.storage.backend)

    if backend == StorageBackend.MEMORY:
        storage = InMemoryStorage()
    elif backend == StorageBackend.GOOGLE_SHEETS:
        storage = GoogleSheetsStorage(GoogleSheetsClient(settings.google_sheets))
    else:
        storage = JsonFileStorage(settings.storage.data_dir)

    logger.info("storage_backend_selected", backend=backend.value)
    return storage


class AppComponents:
    """
    Everything a front end needs, built over one storage backend.

    The stores, audit trail and family hub are shared. Sessions are not:
    each call to open_session gives a client its own login slot.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        hash_rounds: int = 29000,
    ):
        self.storage = storage
        self.store = LedgerStore(storage)
        self.audit_logger = audit_logger or AuditLogger(self.store)
        self._hash_rounds = hash_rounds
        self.session = self.open_session()
        self.family = FamilyHub(self.store, self.audit_logger)

    def open_session(self) -> SessionStore:
        """A session whose currentUser lives in a private in-memory slot."""
        return SessionStore(
            self.store,
            self.audit_logger,
            hash_rounds=self._hash_rounds,
            session_slot=LedgerStore(InMemoryStorage()),
        )

    def ledger_for(self, user_id: str) -> PersonalLedger:
        return PersonalLedger(self.store, user_id, self.audit_logger)

    def inbox_for(self, user_id: str) -> NotificationInbox:
        return NotificationInbox(self.store, user_id, self.audit_logger)

    def current_ledger(self, session: Optional[SessionStore] = None) -> Optional[PersonalLedger]:
        """The logged-in user's ledger, or None without a session."""
        user = (session or self.session).current_user
        if user is None:
            return None
        return self.ledger_for(user.id)

    def current_inbox(self, session: Optional[SessionStore] = None) -> Optional[NotificationInbox]:
        user = (session or self.session).current_user
        if user is None:
            return None
        return self.inbox_for(user.id)


def audit_event_cap(storage: KeyValueStorageInterface, configured: int) -> int:
    """
    How many audit events the backend can hold in one slot.

    A Sheets cell stops at MAX_CELL_CHARS, well short of the default cap.
    """
    if isinstance(storage, GoogleSheetsStorage):
        return min(configured, SHEETS_MAX_AUDIT_EVENTS)
    return configured


def create_app_components(
    storage: Optional[KeyValueStorageInterface] = None,
    seed_family: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        storage: Backend to use. Built from settings when None.
        seed_family: Install the demo household when none exists.
    """
    settings = get_settings()
    app_settings = settings.app
    configure_logging(app_settings.effective_log_level)

    storage = storage or create_storage()
    store = LedgerStore(storage)
    max_events = audit_event_cap(storage, app_settings.max_audit_events)
    audit_logger = AuditLogger(
        store if app_settings.persist_audit_events else None,
        max_events=max_events,
    )

    components = AppComponents(
        storage,
        audit_logger=audit_logger,
        hash_rounds=app_settings.password_hash_rounds,
    )

    if seed_family and components.family.seed_demo_household():
        logger.info("demo_household_seeded")

    logger.info(
        "app_components_created",
        environment=app_settings.app_environment,
        debug=app_settings.debug_mode,
        max_audit_events=max_events,
    )
    return components
