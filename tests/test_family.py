"""
Tests for the family hub: members, chores and shared goals.
"""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from finledger.family import FamilyHub, InsufficientBalanceError, TaskStateError
from finledger.models import (
    AuditEventType,
    FamilyGoal,
    FamilyMember,
    FamilyRole,
    FamilyTask,
    TaskStatus,
)
from finledger.services.storage import (
    FAMILY_GOALS_KEY,
    FAMILY_MEMBERS_KEY,
    InMemoryStorage,
    LedgerStore,
    NotFoundError,
    StorageError,
)


@pytest.fixture
def household(family):
    family.add_member(FamilyMember(id="mum", name="Mum", role=FamilyRole.PARENT,
                                   balance=Decimal("300")))
    family.add_member(FamilyMember(id="kid", name="Kid", role=FamilyRole.CHILD,
                                   balance=Decimal("20")))
    return family


@pytest.fixture
def chore(household):
    return household.add_task(FamilyTask(title="Wash car", assigned_to="kid",
                                         value=Decimal("15")))


class TestMembers:
    """Tests for household members."""

    def test_add_and_list(self, household):
        """Test members are stored in order."""
        assert [m.id for m in household.list_members()] == ["mum", "kid"]

    def test_update_member(self, household):
        """Test editing a member."""
        household.update_member("kid", name="Sam")
        assert household.get_member("kid").name == "Sam"

    def test_remove_member(self, household):
        """Test removing a member."""
        assert household.remove_member("kid") is True
        assert household.get_member("kid") is None


class TestTasks:
    """Tests for the chore workflow."""

    def test_new_task_is_assigned(self, chore):
        """Test that tasks always start assigned."""
        assert chore.status == TaskStatus.ASSIGNED

    def test_task_needs_existing_member(self, household):
        """Test assigning to an unknown member."""
        with pytest.raises(NotFoundError):
            household.add_task(FamilyTask(title="Dust", assigned_to="nobody"))

    def test_list_tasks_by_member(self, household, chore):
        """Test filtering tasks by assignee."""
        assert household.list_tasks(assigned_to="kid") == [chore]
        assert household.list_tasks(assigned_to="mum") == []

    def test_complete_then_approve_credits_once(self, household, chore):
        """Test the happy path pays the task value."""
        household.complete_task(chore.id)
        decided = household.approve_task(chore.id, True)

        assert decided.status == TaskStatus.APPROVED
        assert decided.approved is True
        assert household.get_member("kid").balance == Decimal("35")

    def test_double_approval_refused(self, household, chore):
        """Test that approving twice raises and pays only once."""
        household.complete_task(chore.id)
        household.approve_task(chore.id, True)

        with pytest.raises(TaskStateError):
            household.approve_task(chore.id, True)
        assert household.get_member("kid").balance == Decimal("35")

    def test_rejection_pays_nothing(self, household, chore):
        """Test rejecting a submitted task."""
        household.complete_task(chore.id)
        decided = household.approve_task(chore.id, False)

        assert decided.status == TaskStatus.REJECTED
        assert decided.approved is False
        assert household.get_member("kid").balance == Decimal("20")

    def test_rejected_task_can_be_resubmitted(self, household, chore):
        """Test that a rejected chore goes back for another try."""
        household.complete_task(chore.id)
        household.approve_task(chore.id, False)
        household.complete_task(chore.id)
        household.approve_task(chore.id, True)
        assert household.get_member("kid").balance == Decimal("35")

    def test_cannot_decide_unsubmitted_task(self, household, chore):
        """Test approval before completion."""
        with pytest.raises(TaskStateError):
            household.approve_task(chore.id, True)

    def test_cannot_submit_twice(self, household, chore):
        """Test completing a task that is awaiting a decision."""
        household.complete_task(chore.id)
        with pytest.raises(TaskStateError):
            household.complete_task(chore.id)

    def test_proof_required(self, household):
        """Test that proof-required tasks need proof."""
        task = household.add_task(FamilyTask(title="Homework", assigned_to="kid",
                                             proof_required=True))
        with pytest.raises(TaskStateError):
            household.complete_task(task.id)

        submitted = household.complete_task(task.id, proof="photo.jpg")
        assert submitted.proof_submitted == "photo.jpg"
        assert submitted.status == TaskStatus.SUBMITTED

    def test_status_not_directly_editable(self, household, chore):
        """Test that update_task can't skip the workflow."""
        with pytest.raises(TaskStateError):
            household.update_task(chore.id, status=TaskStatus.APPROVED)

        household.update_task(chore.id, title="Wash both cars")
        assert household.get_task(chore.id).title == "Wash both cars"

    def test_decisions_are_audited(self, household, chore, audit_logger):
        """Test the approval leaves an audit event."""
        household.complete_task(chore.id)
        household.approve_task(chore.id, True)
        event_types = [
            e.event_type for e in audit_logger.events_for_entity("family_task", chore.id)
        ]
        assert AuditEventType.TASK_SUBMITTED in event_types
        assert AuditEventType.TASK_APPROVED in event_types


class TestFamilyGoals:
    """Tests for shared goals and contributions."""

    @pytest.fixture
    def goal(self, household):
        return household.add_goal(FamilyGoal(name="Bikes", target_amount=Decimal("100"),
                                             current_amount=Decimal("60")))

    def test_new_goal_starts_empty(self, goal):
        """Test that add_goal resets progress."""
        assert goal.current_amount == Decimal("0")
        assert goal.contributions == {}

    def test_contribution_conserves_value(self, household, goal):
        """Test balance down and goal up by the same amount."""
        updated_goal, updated_member = household.contribute_to_goal(
            goal.id, "mum", Decimal("80"),
        )
        assert updated_member.balance == Decimal("220")
        assert updated_goal.current_amount == Decimal("80")
        assert updated_goal.contributions == {"mum": Decimal("80")}
        assert not updated_goal.completed

        updated_goal, _ = household.contribute_to_goal(goal.id, "kid", Decimal("20"))
        assert updated_goal.current_amount == Decimal("100")
        assert updated_goal.completed
        assert household.get_member("kid").balance == Decimal("0")

    def test_contributions_accumulate_per_member(self, household, goal):
        """Test repeat contributions add up under one member."""
        household.contribute_to_goal(goal.id, "mum", Decimal("10"))
        household.contribute_to_goal(goal.id, "mum", Decimal("5"))
        assert household.get_goal(goal.id).contributions["mum"] == Decimal("15")

    def test_insufficient_balance_changes_nothing(self, household, goal, storage):
        """Test that a short balance raises and writes nothing."""
        members_before = storage.get_item(FAMILY_MEMBERS_KEY)
        goals_before = storage.get_item(FAMILY_GOALS_KEY)

        with pytest.raises(InsufficientBalanceError) as exc_info:
            household.contribute_to_goal(goal.id, "kid", Decimal("25"))

        assert exc_info.value.member_id == "kid"
        assert storage.get_item(FAMILY_MEMBERS_KEY) == members_before
        assert storage.get_item(FAMILY_GOALS_KEY) == goals_before

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-1")])
    def test_contribution_must_be_positive(self, household, goal, amount):
        """Test zero and negative contributions."""
        with pytest.raises(ValueError):
            household.contribute_to_goal(goal.id, "mum", amount)

    def test_unknown_goal_or_member(self, household, goal):
        """Test contributing to or from something missing."""
        with pytest.raises(NotFoundError):
            household.contribute_to_goal("ghost", "mum", Decimal("1"))
        with pytest.raises(NotFoundError):
            household.contribute_to_goal(goal.id, "ghost", Decimal("1"))


class TestDemoHousehold:
    """Tests for the starter data."""

    def test_seed_empty_hub(self, family):
        """Test seeding writes the demo members, task and goal."""
        today = date(2024, 6, 1)
        assert family.seed_demo_household(today=today) is True

        assert [(m.id, m.balance) for m in family.list_members()] == [
            ("parent1", Decimal("5000")),
            ("child1", Decimal("500")),
        ]
        task = family.get_task("task1")
        assert task.assigned_to == "child1"
        assert task.proof_required
        assert task.due_date == today + timedelta(days=1)

        goal = family.get_goal("goal1")
        assert goal.current_amount == Decimal("1000")
        assert goal.deadline == today + timedelta(days=90)
        assert sum(goal.contributions.values()) == goal.current_amount

    def test_seed_leaves_existing_data(self, household):
        """Test that populated collections are not overwritten."""
        household.seed_demo_household()
        assert [m.id for m in household.list_members()] == ["mum", "kid"]

    def test_seed_is_idempotent(self, family):
        """Test a second seed writes nothing."""
        family.seed_demo_household()
        assert family.seed_demo_household() is False


class KeyFailingStorage(InMemoryStorage):
    """In-memory backend that refuses writes to chosen keys once armed."""

    def __init__(self):
        super().__init__()
        self.failing_keys = set()

    def set_item(self, key, value):
        if key in self.failing_keys:
            raise StorageError(f"write refused for {key}")
        super().set_item(key, value)


class TestPartialWriteRollback:
    """Tests that a failed second write undoes the first."""

    @pytest.fixture
    def backend(self):
        return KeyFailingStorage()

    @pytest.fixture
    def hub(self, backend):
        hub = FamilyHub(LedgerStore(backend))
        hub.seed_demo_household(today=date(2024, 6, 1))
        return hub

    def test_failed_goal_write_restores_member(self, backend, hub):
        """Test balance plus goal amount is unchanged after a failed contribution."""
        before = hub.get_member("child1").balance + hub.get_goal("goal1").current_amount
        backend.failing_keys.add(FAMILY_GOALS_KEY)

        with pytest.raises(StorageError):
            hub.contribute_to_goal("goal1", "child1", Decimal("100"))

        assert hub.get_member("child1").balance == Decimal("500")
        assert hub.get_goal("goal1").current_amount == Decimal("1000")
        assert hub.get_member("child1").balance + hub.get_goal("goal1").current_amount == before

    def test_failed_credit_reopens_task(self, backend, hub):
        """Test that an approval whose credit fails can be retried."""
        hub.complete_task("task1", proof="photo.jpg")
        backend.failing_keys.add(FAMILY_MEMBERS_KEY)

        with pytest.raises(StorageError):
            hub.approve_task("task1", approved=True)

        assert hub.get_task("task1").status == TaskStatus.SUBMITTED
        assert hub.get_member("child1").balance == Decimal("500")

        backend.failing_keys.clear()
        hub.approve_task("task1", approved=True)
        assert hub.get_member("child1").balance == Decimal("550")
