"""Business logic services package with public service helpers."""

from .gravity_tables import (
    ListResponse,
    WriteOutcome,
    WriteRequest,
    read_table,
    remove_from_table,
    write_table,
)

__all__ = [
    "ListResponse",
    "WriteOutcome",
    "WriteRequest",
    "read_table",
    "remove_from_table",
    "write_table",
]
