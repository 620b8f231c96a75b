# Models package init
"""
NoteKeep Backend — ORM Models
=============================

Importing this package registers every table with Base.metadata, which
Alembic autogenerate and the test fixtures rely on.
"""

from notekeep.models.note import Note
from notekeep.models.user import User

__all__ = ["Note", "User"]
