"""
Shared helpers for the entity <-> table mappers.
"""

from typing import Any, Iterable


TIMESTAMP_FIELDS = ("id", "created_at", "updated_at")


def copy_fields(source: Any, target: Any, fields: Iterable[str]) -> None:
    """Copy same-named attributes from one object to another."""
    for name in fields:
        setattr(target, name, getattr(source, name))


def read_fields(model: Any, fields: Iterable[str]) -> dict:
    return {name: getattr(model, name) for name in fields}
