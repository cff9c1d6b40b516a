"""
Tests that bad form input fails with the errors the Streamlit pages catch.

Every page handler catches (ValueError, StorageError), plus FamilyError
on the family page. Anything else would surface as a traceback.
"""

from datetime import date
from decimal import Decimal

import pytest

from finledger.models import Account, Expense, FamilyTask, Goal, Income
from finledger.services.storage import NotFoundError, StorageError

FORM_ERRORS = (ValueError, StorageError)


class TestFormInputErrors:
    """Tests for the exception types raised by invalid form input."""

    def test_empty_income_source(self, ledger):
        """Test that a blank income source is a ValueError."""
        with pytest.raises(FORM_ERRORS):
            ledger.add_income(Income(amount=Decimal("100"), source="  ", date=date.today()))

    def test_empty_expense_category(self, ledger):
        """Test that a blank category is a ValueError."""
        with pytest.raises(FORM_ERRORS):
            ledger.add_expense(Expense(amount=Decimal("5"), category="", date=date.today()))

    def test_empty_account_name(self, ledger):
        """Test that an unnamed account is a ValueError."""
        with pytest.raises(FORM_ERRORS):
            ledger.link_account(Account(name=""))

    def test_contribution_to_missing_goal(self, ledger):
        """Test that contributing to a deleted goal is a StorageError."""
        with pytest.raises(FORM_ERRORS):
            ledger.contribute_to_goal("ghost", Decimal("10"))

    def test_empty_goal_name(self, ledger):
        """Test that an unnamed goal is a ValueError."""
        with pytest.raises(FORM_ERRORS):
            ledger.add_goal(Goal(name="", target_amount=Decimal("10"), deadline=date.today()))

    def test_empty_chore_title(self, family):
        """Test that a blank chore title is a ValueError."""
        with pytest.raises(FORM_ERRORS):
            family.add_task(FamilyTask(title=" ", assigned_to="kid", value=Decimal("5")))

    def test_contribution_without_members(self, family):
        """Test that contributing with no member selected is a NotFoundError."""
        family.seed_demo_household()
        for member in family.list_members():
            family.remove_member(member.id)

        with pytest.raises(NotFoundError):
            family.contribute_to_goal("goal1", None, Decimal("10"))
        assert issubclass(NotFoundError, StorageError)
