"""
Shared fixtures.

Every fixture runs on in-memory storage; no test touches the network
and only the file-backend tests touch disk (through tmp_path).
"""

from datetime import date
from decimal import Decimal

import pytest

from finledger.audit import AuditLogger
from finledger.auth import SessionStore
from finledger.family import FamilyHub
from finledger.ledger import PersonalLedger
from finledger.models import Expense
from finledger.services.storage import InMemoryStorage, LedgerStore


# Low round count keeps hashing fast in tests
TEST_HASH_ROUNDS = 1000


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def store(storage) -> LedgerStore:
    return LedgerStore(storage)


@pytest.fixture
def audit_logger(store) -> AuditLogger:
    return AuditLogger(store)


@pytest.fixture
def ledger(store, audit_logger) -> PersonalLedger:
    return PersonalLedger(store, "user-1", audit_logger)


@pytest.fixture
def family(store, audit_logger) -> FamilyHub:
    return FamilyHub(store, audit_logger)


@pytest.fixture
def session(store, audit_logger) -> SessionStore:
    return SessionStore(store, audit_logger, hash_rounds=TEST_HASH_ROUNDS)


@pytest.fixture
def sample_expenses() -> list[Expense]:
    return [
        Expense(id="e1", amount=Decimal("12.50"), category="Food",
                date=date(2024, 3, 1), note="Lunch with team"),
        Expense(id="e2", amount=Decimal("40.00"), category="Transport",
                date=date(2024, 3, 5), note="Fuel"),
        Expense(id="e3", amount=Decimal("7.50"), category="Food",
                date=date(2024, 3, 5), note="Coffee beans"),
        Expense(id="e4", amount=Decimal("100.00"), category="Housing",
                date=date(2024, 2, 28), note="Plumber"),
    ]
