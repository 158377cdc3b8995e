"""Field-level diffs between task version snapshots.

Pure functions over ``TaskVersion`` objects; loading snapshots is the
history service's job.
"""

from typing import Any, List, Optional, Sequence

from reviewdesk.models.task import CONTENT_FIELDS
from reviewdesk.models.version import FieldChange, ResubmissionPair, TaskDiff, TaskVersion


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def classify_change(old_value: Any, new_value: Any) -> str:
    """Label a differing field as added, removed or modified."""
    if _is_empty(old_value) and not _is_empty(new_value):
        return "added"
    if not _is_empty(old_value) and _is_empty(new_value):
        return "removed"
    return "modified"


def diff_content(old: TaskVersion, new: TaskVersion) -> List[FieldChange]:
    """Differing content fields, in content declaration order."""
    old_content = old.content.model_dump()
    new_content = new.content.model_dump()

    changes = []
    for field in CONTENT_FIELDS:
        old_value = old_content.get(field)
        new_value = new_content.get(field)
        if old_value != new_value:
            changes.append(
                FieldChange(
                    field=field,
                    old_value=old_value,
                    new_value=new_value,
                    type=classify_change(old_value, new_value),
                )
            )
    return changes


def has_content_change(old: TaskVersion, new: TaskVersion) -> bool:
    """True when any field other than the workflow state differs."""
    return old.content != new.content


def compute_diff(old: TaskVersion, new: TaskVersion) -> TaskDiff:
    """Compare two snapshots of the same task directly."""
    if old.task_id != new.task_id:
        raise ValueError(f"Cannot diff versions of different tasks: {old.task_id} != {new.task_id}")

    return TaskDiff(
        task_id=new.task_id,
        from_version=old.version,
        to_version=new.version,
        from_state=old.state,
        to_state=new.state,
        changes=diff_content(old, new),
        changed_by=new.changed_by,
        changed_at=new.timestamp,
    )


def find_latest_content_change(versions: Sequence[TaskVersion]) -> Optional[ResubmissionPair]:
    """Nearest adjacent pair, scanning newest first, whose content differs.

    ``versions`` must be ordered oldest first. Returns None when fewer than
    two versions exist or every transition only changed the state.
    """
    for i in range(len(versions) - 1, 0, -1):
        previous, current = versions[i - 1], versions[i]
        if has_content_change(previous, current):
            return ResubmissionPair(previous=previous, current=current)
    return None
