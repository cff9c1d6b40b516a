"""Ledger repositories."""

from finledger.ledger.repository import CollectionRepository
from finledger.ledger.personal import PersonalLedger

__all__ = ["CollectionRepository", "PersonalLedger"]
