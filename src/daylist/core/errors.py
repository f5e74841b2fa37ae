# src/daylist/core/errors.py

from __future__ import annotations

"""
Error taxonomy.

"Document not found" is not an exception: DocumentStore.load_all() returns None
and callers fall back to an empty snapshot. Stale ids (toggling or deleting a
task that is already gone) are silent no-ops and never raise.
"""


class DaylistError(Exception):
    """Base class for all application errors."""


class StoreUnavailable(DaylistError):
    """The document store could not be reached or returned a failure."""


class PolicyViolation(DaylistError):
    """The user asked for an operation that is not allowed from this view."""


RECURRING_DELETE_MESSAGE = (
    "recurring tasks can only be removed from the recurring-task management view"
)
