"""
Personal Ledger

One user's expenses, incomes, savings goals and linked accounts. Each
collection lives under its own user-scoped key (`expenses_<userId>`,
`incomes_<userId>`, `goals_<userId>`, `accounts_<userId>`).

Every record written through this class is stamped with the owning
user's id. There is no referential integrity with the user list:
deleting a user leaves their collections in place.
"""

from decimal import Decimal
from typing import Optional

from finledger.audit import AuditLogger
from finledger.ledger.repository import CollectionRepository
from finledger.models.audit import AuditEventBuilder
from finledger.models.ledger import Account, Expense, Goal, Income, utc_now
from finledger.services.storage import (
    ACCOUNTS,
    EXPENSES,
    GOALS,
    INCOMES,
    LedgerStore,
    NotFoundError,
    scoped_key,
)


class PersonalLedger:
    """CRUD for one user's ledger."""

    def __init__(
        self,
        store: LedgerStore,
        user_id: str,
        audit_logger: Optional[AuditLogger] = None,
    ):
        if not user_id:
            raise ValueError("A personal ledger needs a user id")
        self._user_id = user_id
        self._audit_logger = audit_logger

        self._expenses = CollectionRepository(
            store, scoped_key(EXPENSES, user_id), Expense, "expense",
            audit_logger, user_id,
        )
        self._incomes = CollectionRepository(
            store, scoped_key(INCOMES, user_id), Income, "income",
            audit_logger, user_id,
        )
        self._goals = CollectionRepository(
            store, scoped_key(GOALS, user_id), Goal, "goal",
            audit_logger, user_id,
        )
        self._accounts = CollectionRepository(
            store, scoped_key(ACCOUNTS, user_id), Account, "account",
            audit_logger, user_id,
        )

    @property
    def user_id(self) -> str:
        return self._user_id

    def _own(self, record):
        return record.model_copy(update={"user_id": self._user_id})

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    def list_expenses(self) -> list[Expense]:
        return self._expenses.list_records()

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        return self._expenses.get(expense_id)

    def add_expense(self, expense: Expense) -> Expense:
        """Record a new expense. The stored copy always has a fresh unique id."""
        return self._expenses.add(self._own(expense))

    def update_expense(self, expense: Expense) -> Expense:
        """Replace an expense wholesale. Raises NotFoundError for unknown ids."""
        return self._expenses.replace(self._own(expense))

    def delete_expense(self, expense_id: str) -> bool:
        return self._expenses.remove(expense_id)

    # -------------------------------------------------------------------------
    # Incomes
    # -------------------------------------------------------------------------

    def list_incomes(self) -> list[Income]:
        return self._incomes.list_records()

    def add_income(self, income: Income) -> Income:
        return self._incomes.add(self._own(income))

    def update_income(self, income: Income) -> Income:
        return self._incomes.replace(self._own(income))

    def delete_income(self, income_id: str) -> bool:
        return self._incomes.remove(income_id)

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    def list_goals(self) -> list[Goal]:
        return self._goals.list_records()

    def get_goal(self, goal_id: str) -> Optional[Goal]:
        return self._goals.get(goal_id)

    def add_goal(self, goal: Goal) -> Goal:
        return self._goals.add(self._own(goal))

    def update_goal(self, goal: Goal) -> Goal:
        return self._goals.replace(self._own(goal))

    def delete_goal(self, goal_id: str) -> bool:
        return self._goals.remove(goal_id)

    def contribute_to_goal(self, goal_id: str, amount: Decimal) -> Goal:
        """
        Add savings to a personal goal.

        The current amount never rises above the target; anything past
        the target is not recorded.

        Raises:
            ValueError: If amount is not positive
            NotFoundError: If the goal doesn't exist
        """
        amount = Decimal(amount)
        if amount <= 0:
            raise ValueError("Contribution must be positive")

        goal = self._goals.get(goal_id)
        if goal is None:
            raise NotFoundError(f"goal not found: {goal_id}")

        new_current = min(goal.current_amount + amount, goal.target_amount)
        updated = self._goals.replace(
            goal.model_copy(update={"current_amount": new_current})
        )
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.goal_contribution(
                goal_id=goal_id,
                amount=str(new_current - goal.current_amount),
                user_id=self._user_id,
            ))
        return updated

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def list_accounts(self) -> list[Account]:
        return self._accounts.list_records()

    def link_account(self, account: Account) -> Account:
        return self._accounts.add(self._own(account))

    def update_account_balance(self, account_id: str, balance: Decimal) -> Account:
        return self._accounts.update(
            account_id,
            balance=Decimal(balance),
            last_updated=utc_now(),
        )

    def unlink_account(self, account_id: str) -> bool:
        return self._accounts.remove(account_id)
