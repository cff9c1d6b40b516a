"""
Finledger - Source Package

Household finance ledger: expenses, income, savings goals, linked
accounts and a shared family hub, persisted in a swappable key-value
store.

DESIGN PRINCIPLES:
1. Storage layer is swappable (memory, local files, Google Sheets)
2. Collections are rewritten wholesale, last write wins
3. Derived values are recomputed on read, never persisted
4. Every mutation is auditable
"""

__version__ = "1.0.0"
__author__ = "Finledger Team"
