"""
Row projection for the list API.

Turns a ``TableRow`` read from the gravity store into the JSON shape of its
list variant, including the reconstruction of group memberships from the
store's comma-joined aggregate.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

from core.db import schemas
from core.db.repositories.gravity import TableRow
from core.utils.list_types import DOMAIN_TYPE_NAMES, ListVariant

_GROUP_AGGREGATE = re.compile(r"[0-9]+(,[0-9]+)*")


class MalformedGroupAggregate(ValueError):
    """The store returned a group aggregate that is not digits and commas."""


def parse_group_ids(raw: Optional[str]) -> List[int]:
    """Rebuild a JSON integer array from a ``GROUP_CONCAT`` result.

    ``"1,2,3"`` becomes ``[1, 2, 3]`` and ``None`` becomes ``[]``. The text is
    bracketed and parsed as JSON, so anything other than digits and commas is
    rejected up front rather than producing a half-parsed array.
    """
    if raw is None:
        return []
    raw = str(raw)
    if not _GROUP_AGGREGATE.fullmatch(raw):
        raise MalformedGroupAggregate(f"Invalid group aggregate: {raw!r}")
    try:
        return json.loads(f"[{raw}]")
    except json.JSONDecodeError as exc:  # leading zeros are not valid JSON numbers
        raise MalformedGroupAggregate(f"Invalid group aggregate: {raw!r}") from exc


def project_row(variant: ListVariant, row: TableRow) -> Dict[str, Any]:
    common = dict(
        id=row.id,
        enabled=bool(row.enabled),
        date_added=row.date_added,
        date_modified=row.date_modified,
    )
    if variant is ListVariant.GROUPS:
        item = schemas.GroupItem(name=row.name, description=row.description, **common)
    elif variant is ListVariant.ADLISTS:
        item = schemas.AdlistItem(address=row.address, comment=row.comment, **common)
    elif variant is ListVariant.CLIENTS:
        # No list type for clients
        item = schemas.DomainItem(
            domain=row.ip,
            type=None,
            comment=row.comment,
            groups=parse_group_ids(row.group_ids),
            **common,
        )
    elif variant.is_domainlist:
        item = schemas.DomainItem(
            domain=row.domain,
            type=DOMAIN_TYPE_NAMES[row.type],
            comment=row.comment,
            groups=parse_group_ids(row.group_ids),
            **common,
        )
    else:
        raise ValueError(f"Unhandled list variant: {variant!r}")
    return item.model_dump()
