"""Deletion of confirmed candidate files."""

from ggufclean.deletion.executor import DeleteErrorKind, DeleteResult, DeletionExecutor

__all__ = [
    "DeleteErrorKind",
    "DeleteResult",
    "DeletionExecutor",
]
