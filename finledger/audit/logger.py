"""
Audit Logger

Every mutation in the system is logged. The audit logger:
- Always writes a structured JSON log line via structlog
- Optionally appends the event to the `audit-log` collection
- Never lets a failed audit write break the operation being audited
"""

import logging
from typing import Optional

import structlog

from finledger.services.storage import AUDIT_LOG_KEY, LedgerStore, StorageError
from finledger.models.audit import AuditEvent, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route stdlib logging (and so structlog output) to stderr at `level`."""
    numeric_level = getattr(logging, level.upper())
    logging.basicConfig(format="%(message)s", level=numeric_level)
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(numeric_level)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit-log collection (when a store is given)
    """

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        max_events: int = 500,
    ):
        """
        Initialize audit logger.

        Args:
            store: Ledger store for persistence.
                   If None, only logs locally.
            max_events: Oldest persisted events are dropped past this count.
        """
        self._store = store
        self._max_events = max_events
        self._logger = structlog.get_logger("finledger.audit")

    @property
    def max_events(self) -> int:
        return self._max_events

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if the storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._store is None:
            return True

        try:
            events = self._store.get(AUDIT_LOG_KEY, AuditEvent)
            events.append(event)
            self._store.set(AUDIT_LOG_KEY, events[-self._max_events:], model=AuditEvent)
            return True
        except StorageError as e:
            # Log failure but don't raise
            self._logger.error(
                "audit_storage_failed",
                error=str(e),
                event_id=event.event_id,
            )
            return False

    def recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Most recent persisted events, newest first."""
        if self._store is None:
            return []
        events = self._store.get(AUDIT_LOG_KEY, AuditEvent)
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]

    def events_for_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        """Persisted events about one record, oldest first."""
        if self._store is None:
            return []
        events = [
            e for e in self._store.get(AUDIT_LOG_KEY, AuditEvent)
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events
