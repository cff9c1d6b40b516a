"""
Family Hub

Shared household ledger over three unscoped keys: `family-members`,
`family-tasks` and `family-goals`.

GUARANTEES:
- A task is paid out at most once. Only a SUBMITTED task can be
  decided and APPROVED is terminal.
- A goal contribution moves value, it never creates it. The member's
  balance falls by exactly what the goal gains, and a contribution the
  balance cannot cover changes nothing.
- Operations that write two collections undo the first write when the
  second raises StorageError, then re-raise.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Optional

import structlog

from finledger.audit import AuditLogger
from finledger.ledger.repository import CollectionRepository
from finledger.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from finledger.models.family import (
    FamilyGoal,
    FamilyMember,
    FamilyRole,
    FamilyTask,
    TaskStatus,
)
from finledger.services.storage import (
    FAMILY_GOALS_KEY,
    FAMILY_MEMBERS_KEY,
    FAMILY_TASKS_KEY,
    LedgerStore,
    NotFoundError,
    StorageError,
)


logger = structlog.get_logger(__name__)


class FamilyError(Exception):
    """Base exception for household operations."""
    pass


class InsufficientBalanceError(FamilyError):
    """A member tried to contribute more than their balance."""

    def __init__(self, member_id: str, balance: Decimal, amount: Decimal):
        self.member_id = member_id
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"Member {member_id} has {balance}, cannot contribute {amount}"
        )


class TaskStateError(FamilyError):
    """The task is not in a state that allows the requested transition."""
    pass


class FamilyHub:
    """Members, chores and shared goals of one household."""

    def __init__(
        self,
        store: LedgerStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit_logger = audit_logger
        self._members = CollectionRepository(
            store, FAMILY_MEMBERS_KEY, FamilyMember, "family_member", audit_logger,
        )
        self._tasks = CollectionRepository(
            store, FAMILY_TASKS_KEY, FamilyTask, "family_task", audit_logger,
        )
        self._goals = CollectionRepository(
            store, FAMILY_GOALS_KEY, FamilyGoal, "family_goal", audit_logger,
        )

    def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _require_member(self, member_id: str) -> FamilyMember:
        member = self._members.get(member_id)
        if member is None:
            raise NotFoundError(f"family member not found: {member_id}")
        return member

    def _require_task(self, task_id: str) -> FamilyTask:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError(f"family task not found: {task_id}")
        return task

    # -------------------------------------------------------------------------
    # Members
    # -------------------------------------------------------------------------

    def list_members(self) -> list[FamilyMember]:
        return self._members.list_records()

    def get_member(self, member_id: str) -> Optional[FamilyMember]:
        return self._members.get(member_id)

    def add_member(self, member: FamilyMember) -> FamilyMember:
        return self._members.add(member)

    def update_member(self, member_id: str, **changes: Any) -> FamilyMember:
        return self._members.update(member_id, **changes)

    def remove_member(self, member_id: str) -> bool:
        """Remove a member. Their tasks and contributions are left as they are."""
        return self._members.remove(member_id)

    # -------------------------------------------------------------------------
    # Tasks
    # -------------------------------------------------------------------------

    def list_tasks(self, assigned_to: Optional[str] = None) -> list[FamilyTask]:
        tasks = self._tasks.list_records()
        if assigned_to is not None:
            tasks = [t for t in tasks if t.assigned_to == assigned_to]
        return tasks

    def get_task(self, task_id: str) -> Optional[FamilyTask]:
        return self._tasks.get(task_id)

    def add_task(self, task: FamilyTask) -> FamilyTask:
        """Assign a new chore. The assignee must be a current member."""
        self._require_member(task.assigned_to)
        return self._tasks.add(task.model_copy(update={
            "status": TaskStatus.ASSIGNED,
            "proof_submitted": None,
        }))

    def update_task(self, task_id: str, **changes: Any) -> FamilyTask:
        """
        Edit a task's details.

        Status only moves through complete_task and approve_task.
        """
        if "status" in changes:
            raise TaskStateError("Task status cannot be edited directly")
        return self._tasks.update(task_id, **changes)

    def remove_task(self, task_id: str) -> bool:
        return self._tasks.remove(task_id)

    def complete_task(self, task_id: str, proof: Optional[str] = None) -> FamilyTask:
        """
        Mark a chore as done and submit it for approval.

        Raises:
            NotFoundError: If the task doesn't exist
            TaskStateError: If the task was already submitted or approved,
                or proof is required but missing
        """
        task = self._require_task(task_id)
        if task.status not in (TaskStatus.ASSIGNED, TaskStatus.REJECTED):
            raise TaskStateError(
                f"Task {task_id} is {task.status.value} and cannot be submitted"
            )
        if task.proof_required and not proof:
            raise TaskStateError(f"Task {task_id} requires proof of completion")

        submitted = self._tasks.replace(task.model_copy(update={
            "status": TaskStatus.SUBMITTED,
            "proof_submitted": proof,
        }))
        self._audit(AuditEvent(
            event_type=AuditEventType.TASK_SUBMITTED,
            entity_type="family_task",
            entity_id=task_id,
            description="Task submitted for approval",
            details={"member_id": task.assigned_to, "has_proof": bool(proof)},
        ))
        return submitted

    def approve_task(self, task_id: str, approved: bool) -> FamilyTask:
        """
        Decide a submitted chore.

        Approval credits the assigned member with the task value. The
        task is moved out of SUBMITTED before the credit is written, so
        a repeated call is refused instead of paying twice.

        Raises:
            NotFoundError: If the task or its assignee doesn't exist
            TaskStateError: If the task is not awaiting a decision
        """
        task = self._require_task(task_id)
        if task.status != TaskStatus.SUBMITTED:
            raise TaskStateError(
                f"Task {task_id} is {task.status.value}; only submitted tasks can be decided"
            )

        member = self._require_member(task.assigned_to) if approved else None

        decided = self._tasks.replace(task.model_copy(update={
            "status": TaskStatus.APPROVED if approved else TaskStatus.REJECTED,
        }))

        if member is not None:
            try:
                self._members.replace(member.model_copy(update={
                    "balance": member.balance + task.value,
                }))
            except StorageError:
                # Back to SUBMITTED so the approval can be retried
                self._tasks.replace(task)
                logger.error("task_approval_rolled_back", task_id=task_id)
                raise

        self._audit(AuditEventBuilder.task_decided(
            task_id=task_id,
            approved=approved,
            member_id=task.assigned_to,
            value=str(task.value),
        ))
        return decided

    # -------------------------------------------------------------------------
    # Goals
    # -------------------------------------------------------------------------

    def list_goals(self) -> list[FamilyGoal]:
        return self._goals.list_records()

    def get_goal(self, goal_id: str) -> Optional[FamilyGoal]:
        return self._goals.get(goal_id)

    def add_goal(self, goal: FamilyGoal) -> FamilyGoal:
        """Create a shared goal. New goals always start empty."""
        return self._goals.add(goal.model_copy(update={
            "current_amount": Decimal("0"),
            "contributions": {},
        }))

    def update_goal(self, goal_id: str, **changes: Any) -> FamilyGoal:
        return self._goals.update(goal_id, **changes)

    def remove_goal(self, goal_id: str) -> bool:
        return self._goals.remove(goal_id)

    def contribute_to_goal(
        self,
        goal_id: str,
        member_id: str,
        amount: Decimal,
    ) -> tuple[FamilyGoal, FamilyMember]:
        """
        Move part of a member's balance into a shared goal.

        Returns:
            (updated_goal, updated_member)

        Raises:
            ValueError: If amount is not positive
            NotFoundError: If the goal or member doesn't exist
            InsufficientBalanceError: If the balance is below amount;
                nothing is written
        """
        amount = Decimal(amount)
        if amount <= 0:
            raise ValueError("Contribution must be positive")

        goal = self._goals.get(goal_id)
        if goal is None:
            raise NotFoundError(f"family goal not found: {goal_id}")
        member = self._require_member(member_id)

        if member.balance < amount:
            self._audit(AuditEventBuilder.contribution_rejected(
                goal_id=goal_id,
                member_id=member_id,
                amount=str(amount),
                balance=str(member.balance),
            ))
            raise InsufficientBalanceError(member_id, member.balance, amount)

        contributions = dict(goal.contributions)
        contributions[member_id] = contributions.get(member_id, Decimal("0")) + amount

        updated_member = self._members.replace(member.model_copy(update={
            "balance": member.balance - amount,
        }))
        try:
            updated_goal = self._goals.replace(goal.model_copy(update={
                "current_amount": goal.current_amount + amount,
                "contributions": contributions,
            }))
        except StorageError:
            self._members.replace(member)
            logger.error(
                "contribution_rolled_back",
                goal_id=goal_id,
                member_id=member_id,
                amount=str(amount),
            )
            raise

        self._audit(AuditEventBuilder.goal_contribution(
            goal_id=goal_id,
            amount=str(amount),
            member_id=member_id,
        ))
        return updated_goal, updated_member

    # -------------------------------------------------------------------------
    # Demo data
    # -------------------------------------------------------------------------

    def seed_demo_household(self, today: Optional[date] = None) -> bool:
        """
        Fill empty collections with a starter household.

        Collections that already hold data are left alone.
        Returns True if anything was written.
        """
        today = today or date.today()
        seeded = False

        if not self._members.list_records():
            self._members.save_all([
                FamilyMember(id="parent1", name="Parent", role=FamilyRole.PARENT,
                             balance=Decimal("5000")),
                FamilyMember(id="child1", name="Child", role=FamilyRole.CHILD,
                             balance=Decimal("500")),
            ])
            seeded = True

        if not self._tasks.list_records():
            self._tasks.save_all([
                FamilyTask(
                    id="task1",
                    title="Clean your room",
                    description="Make your bed and organize your desk",
                    assigned_to="child1",
                    value=Decimal("50"),
                    due_date=today + timedelta(days=1),
                    proof_required=True,
                ),
            ])
            seeded = True

        if not self._goals.list_records():
            self._goals.save_all([
                FamilyGoal(
                    id="goal1",
                    name="Family Vacation",
                    description="Trip to the beach this summer",
                    target_amount=Decimal("5000"),
                    current_amount=Decimal("1000"),
                    deadline=today + timedelta(days=90),
                    contributions={
                        "parent1": Decimal("800"),
                        "child1": Decimal("200"),
                    },
                ),
            ])
            seeded = True

        return seeded
