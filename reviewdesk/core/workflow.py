"""Review workflow state machine."""

from typing import Dict, List

from reviewdesk.models.task import TaskState
from reviewdesk.models.review import ReviewDecision


VALID_TASK_TRANSITIONS: Dict[TaskState, List[TaskState]] = {
    TaskState.DRAFT: [TaskState.SUBMITTED],
    TaskState.SUBMITTED: [TaskState.IN_REVIEW],
    TaskState.IN_REVIEW: [TaskState.APPROVED, TaskState.REJECTED, TaskState.CHANGES_REQUESTED],
    TaskState.APPROVED: [],
    TaskState.REJECTED: [],
    TaskState.CHANGES_REQUESTED: [TaskState.DRAFT, TaskState.SUBMITTED],
}

DECISION_TO_STATE: Dict[ReviewDecision, TaskState] = {
    ReviewDecision.APPROVE: TaskState.APPROVED,
    ReviewDecision.REJECT: TaskState.REJECTED,
    ReviewDecision.REQUEST_CHANGES: TaskState.CHANGES_REQUESTED,
}

EDITABLE_STATES = [TaskState.DRAFT, TaskState.CHANGES_REQUESTED]
SUBMITTABLE_STATES = [TaskState.DRAFT, TaskState.CHANGES_REQUESTED]
REVIEWABLE_STATES = [TaskState.SUBMITTED, TaskState.IN_REVIEW]
DELETABLE_STATES = [TaskState.DRAFT, TaskState.REJECTED]
DECIDED_STATES = [TaskState.APPROVED, TaskState.REJECTED, TaskState.CHANGES_REQUESTED]


def is_valid_transition(current: str, new: str) -> bool:
    return TaskState(new) in VALID_TASK_TRANSITIONS[TaskState(current)]


def state_from_decision(decision: str) -> TaskState:
    return DECISION_TO_STATE[ReviewDecision(decision)]


def state_after_edit(current: str) -> TaskState:
    """Editing a task sent back for changes returns it to DRAFT."""
    if TaskState(current) == TaskState.CHANGES_REQUESTED:
        return TaskState.DRAFT
    return TaskState(current)


def can_edit(state: str) -> bool:
    return TaskState(state) in EDITABLE_STATES


def can_submit(state: str) -> bool:
    return TaskState(state) in SUBMITTABLE_STATES


def can_delete(state: str) -> bool:
    return TaskState(state) in DELETABLE_STATES


def is_reviewable(state: str) -> bool:
    return TaskState(state) in REVIEWABLE_STATES


def is_final_state(state: str) -> bool:
    return not VALID_TASK_TRANSITIONS[TaskState(state)]
