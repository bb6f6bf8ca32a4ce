"""
Table reader, writer and remover behind the list API.

A write runs as explicit phases: the payload is validated into a
``WriteRequest``, the store write yields a ``WriteOutcome``, and the response
is always a fresh read of the stored row. Row write and group replacement are
two separate store commits; a failed group replacement leaves the written row
in place.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, NamedTuple, Optional

from sqlalchemy.orm import Session

from core.api.errors import bad_request, database_error
from core.db.repositories import gravity
from core.db.repositories.gravity import StoreError, StoredRow
from core.db.row_codec import MalformedGroupAggregate, project_row
from core.utils.list_types import ListVariant

logger = logging.getLogger(__name__)


class ListResponse(NamedTuple):
    status_code: int
    body: Optional[Dict[str, Any]]


def _store_error_data(argument: Optional[str], sql_msg: Optional[str]) -> Dict[str, Any]:
    return {"argument": argument, "sql_msg": sql_msg}


def read_table(
    db: Session,
    variant: ListVariant,
    argument: Optional[str] = None,
    status_code: int = 200,
) -> ListResponse:
    try:
        with gravity.open_table(db, variant, argument) as cursor:
            items = []
            codec_error = None
            for row in cursor:
                try:
                    items.append(project_row(variant, row))
                except MalformedGroupAggregate as exc:
                    # Keep draining; the first failure decides the response
                    if codec_error is None:
                        codec_error = str(exc)
            sql_msg = cursor.sql_msg or codec_error
    except StoreError as exc:
        logger.warning("read_open_failed: list=%s argument=%r sql_msg=%s", variant.name, argument, exc.sql_msg)
        raise database_error(
            "Could not read domains from database table",
            _store_error_data(argument, exc.sql_msg),
        )

    # Errors surface only once the cursor is drained; never return a partial list
    if sql_msg is not None:
        logger.warning("read_failed: list=%s argument=%r sql_msg=%s", variant.name, argument, sql_msg)
        raise database_error(
            "Could not read from gravity database",
            _store_error_data(argument, sql_msg),
        )
    return ListResponse(status_code, {variant.response_key: items})


_GROUPS_ABSENT = object()


def _optional_string(payload: Dict[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class WriteRequest:
    argument: str
    enabled: bool
    comment: Optional[str] = None
    description: Optional[str] = None
    name: Optional[str] = None
    oldtype: Optional[str] = None
    groups: Any = _GROUPS_ABSENT

    @property
    def replaces_groups(self) -> bool:
        return self.groups is not _GROUPS_ABSENT

    @classmethod
    def from_payload(cls, argument: str, payload: Any) -> "WriteRequest":
        if not isinstance(payload, dict):
            raise bad_request("Invalid request body data")
        enabled = payload.get("enabled")
        if not isinstance(enabled, bool):
            raise bad_request("No \"enabled\" boolean in body data")
        return cls(
            argument=argument,
            enabled=enabled,
            comment=_optional_string(payload, "comment"),
            description=_optional_string(payload, "description"),
            name=_optional_string(payload, "name"),
            oldtype=_optional_string(payload, "oldtype"),
            groups=payload.get("groups", _GROUPS_ABSENT),
        )

    def echo(self, sql_msg: Optional[str]) -> Dict[str, Any]:
        """Submitted fields for the error body; unset optionals are left out."""
        data: Dict[str, Any] = {"argument": self.argument, "enabled": self.enabled}
        for key in ("comment", "description", "name", "oldtype"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data["sql_msg"] = sql_msg
        return data


@dataclass(frozen=True)
class WriteOutcome:
    row: StoredRow
    groups_replaced: bool


def write_table(
    db: Session,
    variant: ListVariant,
    argument: str,
    method: str,
    payload: Any,
) -> ListResponse:
    """Create (POST) or update (PUT) one row, then answer with a fresh read of it."""
    request = WriteRequest.from_payload(argument, payload)

    try:
        stored = gravity.add_to_table(
            db,
            variant,
            request.argument,
            enabled=request.enabled,
            comment=request.comment,
            description=request.description,
            name=request.name,
            oldtype=request.oldtype,
            method=method,
        )
    except StoreError as exc:
        logger.warning("write_failed: list=%s argument=%r sql_msg=%s", variant.name, argument, exc.sql_msg)
        raise database_error("Could not add to gravity database", request.echo(exc.sql_msg))
    outcome = WriteOutcome(row=stored, groups_replaced=False)

    if request.replaces_groups:
        try:
            gravity.edit_groups(db, variant, stored.id, request.groups)
        except StoreError as exc:
            logger.warning(
                "group_replace_failed: list=%s argument=%r row_id=%s sql_msg=%s (row write kept)",
                variant.name, argument, stored.id, exc.sql_msg,
            )
            raise database_error("Could not add to gravity database", request.echo(exc.sql_msg))
        outcome = WriteOutcome(row=stored, groups_replaced=True)

    logger.info(
        "list_write: method=%s list=%s argument=%r row_id=%s groups_replaced=%s",
        method, variant.name, outcome.row.argument, outcome.row.id, outcome.groups_replaced,
    )
    status_code = 201 if method == "POST" else 200
    return read_table(db, variant, outcome.row.argument, status_code=status_code)


def remove_from_table(db: Session, variant: ListVariant, argument: str) -> ListResponse:
    try:
        gravity.delete_from_table(db, variant, argument)
    except StoreError as exc:
        logger.warning("delete_failed: list=%s argument=%r sql_msg=%s", variant.name, argument, exc.sql_msg)
        raise database_error(
            "Could not remove domain from database table",
            _store_error_data(argument, exc.sql_msg),
        )
    logger.info("list_delete: list=%s argument=%r", variant.name, argument)
    return ListResponse(204, None)
