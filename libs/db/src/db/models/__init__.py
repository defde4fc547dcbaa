"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the captured-transaction model used by
``notification_capture``.
"""

from .capture import Base, NcTransaction

__all__ = [
    "Base",
    "NcTransaction",
]
