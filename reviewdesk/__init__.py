"""Task review service package.

Creators author tasks and submit them for review; reviewers approve, reject
or request changes.

Main features:
- Task management: CRUD, duplicate, submit for review
- Review workflow: start review, decisions, reviewer queues
- History: versioned snapshots, field-level diffs, resubmission lookups
- Audit: per-entity audit trail
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
