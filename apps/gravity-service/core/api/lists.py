"""
List API endpoints.

One dispatcher serves every list under ``/api``: groups, adlists, clients
and the domain lists. The path picks the list variant and, optionally, a
single item; the HTTP method picks read, write or delete.
"""
import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from core.api.auth import check_client_auth
from core.api.errors import bad_request, not_found, unauthorized
from core.db.database import get_db
from core.services.gravity_tables import ListResponse, read_table, remove_from_table, write_table
from core.utils.list_types import resolve_list_path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["lists"])

MUTATING_METHODS = ("POST", "PUT", "PATCH", "DELETE")
# Unsupported verbs still pass the auth check before the 404
ROUTED_METHODS = ("GET", "HEAD", "OPTIONS", "TRACE", *MUTATING_METHODS)


async def get_json_payload(request: Request) -> Optional[Any]:
    """Decoded JSON body, or None when the body is empty or not JSON."""
    body = await request.body()
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


def _render(result: ListResponse) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code)
    return JSONResponse(result.body, status_code=result.status_code)


@router.api_route("/{list_path:path}", methods=list(ROUTED_METHODS))
def dispatch_list_request(
    request: Request,
    list_path: str,
    payload: Optional[Any] = Depends(get_json_payload),
    db: Session = Depends(get_db),
):
    if not check_client_auth(request):
        raise unauthorized()

    resolved = resolve_list_path(f"/api/{list_path}")
    if resolved is None:
        raise not_found()
    variant, argument = resolved
    method = request.method

    if method == "GET":
        return _render(read_table(db, variant, argument))
    if not variant.mutable:
        raise bad_request("Invalid request: Specify list to modify")
    if method in ("POST", "PUT", "DELETE") and argument is None:
        raise bad_request("Invalid request: Specify item to modify")
    if method in ("POST", "PUT"):
        return _render(write_table(db, variant, argument, method, payload))
    if method == "DELETE":
        return _render(remove_from_table(db, variant, argument))
    raise not_found()
