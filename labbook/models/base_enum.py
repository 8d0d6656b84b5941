# labbook/models/base_enum.py
"""
Safe enum helpers for SQLAlchemy.

SQLAlchemy's Enum stores member NAMES by default ('IN_PROGRESS'); the
booking tables store VALUES ('in_progress') so rows written by raw SQL
or migrations match what the ORM reads back.
"""

from enum import Enum
from typing import Sequence, Type

from sqlalchemy import Enum as SAEnum


def create_safe_enum(enum_class: Type[Enum], name: str) -> SAEnum:
    """
    Create a SQLAlchemy Enum column type that persists enum values.

    Uses a VARCHAR + CHECK constraint rather than a native PostgreSQL type
    so the same schema runs on SQLite.
    """
    return SAEnum(
        enum_class,
        name=name,
        native_enum=False,
        create_constraint=True,
        validate_strings=True,
        values_callable=_get_enum_values,
    )


def _get_enum_values(enum_class: Type[Enum]) -> Sequence[str]:
    return [member.value for member in enum_class]
