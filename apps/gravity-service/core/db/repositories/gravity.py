"""
Gravity list repository functions.

Implements the store side of the list API: a scoped read cursor, add-or-update,
group membership replacement and delete-by-identity for every list variant.
Every SQLAlchemy failure is surfaced as ``StoreError`` carrying the driver
message, so callers never see ORM exceptions.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Type

from sqlalchemy import String, cast, delete, func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.db import models
from core.utils.list_types import ListVariant, parse_domain_type

logger = logging.getLogger(__name__)

ITEM_NOT_FOUND = "Requested item does not exist"


class StoreError(Exception):
    """A gravity database operation failed; ``sql_msg`` may be None."""

    def __init__(self, sql_msg: Optional[str] = None):
        super().__init__(sql_msg or "gravity database error")
        self.sql_msg = sql_msg


@dataclass(frozen=True)
class TableRow:
    id: int
    enabled: bool
    date_added: int
    date_modified: int
    name: Optional[str] = None
    address: Optional[str] = None
    ip: Optional[str] = None
    domain: Optional[str] = None
    type: Optional[int] = None
    comment: Optional[str] = None
    description: Optional[str] = None
    group_ids: Optional[str] = None


@dataclass(frozen=True)
class StoredRow:
    """Result of a successful add-or-update: the row id and its identity after the write."""
    id: int
    argument: str


class _TableInfo(NamedTuple):
    model: Type[models.Base]
    identity: str
    link: Optional[Type[models.Base]]
    link_fk: Optional[str]


def _table_for(variant: ListVariant) -> _TableInfo:
    if variant is ListVariant.GROUPS:
        return _TableInfo(models.Group, "name", None, None)
    if variant is ListVariant.ADLISTS:
        return _TableInfo(models.Adlist, "address", models.AdlistByGroup, "adlist_id")
    if variant is ListVariant.CLIENTS:
        return _TableInfo(models.Client, "ip", models.ClientByGroup, "client_id")
    if variant.is_domainlist:
        return _TableInfo(models.DomainListEntry, "domain", models.DomainListByGroup, "domainlist_id")
    raise ValueError(f"Unhandled list variant: {variant!r}")


def _sql_message(exc: SQLAlchemyError) -> str:
    # Prefer the DBAPI message ("UNIQUE constraint failed: ...") over
    # SQLAlchemy's wrapper text with the statement attached.
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def _group_concat(db: Session, column):
    if db.get_bind().dialect.name == "postgresql":
        return func.string_agg(cast(column, String), ",")
    return func.group_concat(column)


def _select_for(db: Session, variant: ListVariant, argument: Optional[str]):
    info = _table_for(variant)
    model = info.model
    columns = [model.id, model.enabled, model.date_added, model.date_modified]

    if variant is ListVariant.GROUPS:
        columns += [model.name, model.description]
    elif variant is ListVariant.ADLISTS:
        columns += [model.address, model.comment]
    elif variant is ListVariant.CLIENTS:
        columns += [model.ip, model.comment]
    else:
        columns += [model.domain, model.type, model.comment]

    # Adlist memberships exist in the schema but are not part of the projection
    if info.link is not None and variant is not ListVariant.ADLISTS:
        link_fk = getattr(info.link, info.link_fk)
        group_ids = (
            select(_group_concat(db, info.link.group_id))
            .where(link_fk == model.id)
            .scalar_subquery()
            .label("group_ids")
        )
        columns.append(group_ids)

    stmt = select(*columns)
    if variant.is_domainlist:
        stmt = stmt.where(model.type.in_(variant.type_codes))
    if argument is not None:
        stmt = stmt.where(getattr(model, info.identity) == argument)
    return stmt.order_by(model.id)


class TableCursor:
    """Iterates store rows; a failure mid-stream ends iteration and sets ``sql_msg``."""

    def __init__(self, result):
        self._result = result
        self.sql_msg: Optional[str] = None

    def __iter__(self) -> Iterator[TableRow]:
        try:
            for mapping in self._result.mappings():
                yield TableRow(**mapping)
        except SQLAlchemyError as exc:
            self.sql_msg = _sql_message(exc)

    def close(self) -> None:
        self._result.close()


@contextmanager
def open_table(db: Session, variant: ListVariant, argument: Optional[str] = None) -> Iterator[TableCursor]:
    """Open a read cursor over one list, optionally narrowed to a single identity.

    Raises ``StoreError`` if the query cannot be started. The cursor is closed
    when the context exits, whichever way it exits.
    """
    try:
        result = db.execute(_select_for(db, variant, argument))
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(_sql_message(exc)) from exc
    cursor = TableCursor(result)
    try:
        yield cursor
    finally:
        cursor.close()


def _apply_fields(row, variant: ListVariant, *, enabled: bool, comment: Optional[str], description: Optional[str]):
    row.enabled = enabled
    if variant is ListVariant.GROUPS:
        row.description = description
    else:
        row.comment = comment


def add_to_table(
    db: Session,
    variant: ListVariant,
    argument: str,
    *,
    enabled: bool,
    comment: Optional[str] = None,
    description: Optional[str] = None,
    name: Optional[str] = None,
    oldtype: Optional[str] = None,
    method: str = "POST",
) -> StoredRow:
    """Insert (POST) or insert-or-update (PUT) the row addressed by ``argument``.

    PUT extras: ``name`` renames a group, ``oldtype`` moves a domain from
    another list type into this variant's list.
    """
    info = _table_for(variant)
    model = info.model
    identity = getattr(model, info.identity)
    fields = dict(enabled=enabled, comment=comment, description=description)

    try:
        existing = None
        if method == "PUT":
            q = db.query(model).filter(identity == argument)
            if variant.is_domainlist:
                lookup_type = variant.type_code
                if oldtype is not None:
                    lookup_type = parse_domain_type(oldtype)
                    if lookup_type is None:
                        raise StoreError(f"Invalid oldtype \"{oldtype}\"")
                q = q.filter(model.type == lookup_type)
            existing = q.first()

        if existing is None:
            row = model(**{info.identity: argument})
            if variant.is_domainlist:
                row.type = variant.type_code
            db.add(row)
        else:
            row = existing
            if variant.is_domainlist:
                row.type = variant.type_code
        _apply_fields(row, variant, **fields)
        if variant is ListVariant.GROUPS and name and existing is not None:
            row.name = name
        db.flush()
        stored = StoredRow(id=row.id, argument=getattr(row, info.identity))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(_sql_message(exc)) from exc
    except StoreError:
        db.rollback()
        raise
    return stored


def edit_groups(db: Session, variant: ListVariant, row_id: int, groups) -> List[int]:
    """Replace the group memberships of one row with ``groups``."""
    info = _table_for(variant)
    if info.link is None:
        raise StoreError("Group membership cannot be assigned to groups")
    if not isinstance(groups, list) or any(isinstance(g, bool) or not isinstance(g, int) for g in groups):
        raise StoreError("\"groups\" must be an array of integer group IDs")

    group_ids = list(dict.fromkeys(groups))
    link_fk = getattr(info.link, info.link_fk)
    try:
        db.execute(delete(info.link).where(link_fk == row_id))
        if group_ids:
            db.execute(
                insert(info.link),
                [{info.link_fk: row_id, "group_id": group_id} for group_id in group_ids],
            )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(_sql_message(exc)) from exc
    return group_ids


def delete_from_table(db: Session, variant: ListVariant, argument: str) -> None:
    """Delete the row addressed by ``argument``; a missing row is an error."""
    info = _table_for(variant)
    model = info.model
    stmt = delete(model).where(getattr(model, info.identity) == argument)
    if variant.is_domainlist:
        stmt = stmt.where(model.type.in_(variant.type_codes))
    try:
        result = db.execute(stmt)
        if result.rowcount == 0:
            db.rollback()
            raise StoreError(ITEM_NOT_FOUND)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise StoreError(_sql_message(exc)) from exc
