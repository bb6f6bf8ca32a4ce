"""List variant definitions.

Every list the API exposes is one member of ``ListVariant``. The member
carries the routing prefix, the response key and whether the public API may
modify it. Domain list variants additionally carry an allow/deny scope and an
exact/regex kind; ``ANY`` in either position means "all of them" and makes the
variant read-only.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple


class Scope(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    ANY = "any"


class Kind(str, Enum):
    EXACT = "exact"
    REGEX = "regex"
    ANY = "any"


# Numeric ``domainlist.type`` values as stored in the gravity database.
DOMAIN_TYPE_CODES = {
    (Scope.ALLOW, Kind.EXACT): 0,
    (Scope.DENY, Kind.EXACT): 1,
    (Scope.ALLOW, Kind.REGEX): 2,
    (Scope.DENY, Kind.REGEX): 3,
}
DOMAIN_TYPE_NAMES = {code: f"{s.value}/{k.value}" for (s, k), code in DOMAIN_TYPE_CODES.items()}


class ListVariant(Enum):
    GROUPS = ("/api/groups", None, None)
    ADLISTS = ("/api/adlists", None, None)
    CLIENTS = ("/api/clients", None, None)
    DOMAINS_ALLOW_EXACT = ("/api/domains/allow/exact", Scope.ALLOW, Kind.EXACT)
    DOMAINS_ALLOW_REGEX = ("/api/domains/allow/regex", Scope.ALLOW, Kind.REGEX)
    DOMAINS_ALLOW_ALL = ("/api/domains/allow", Scope.ALLOW, Kind.ANY)
    DOMAINS_DENY_EXACT = ("/api/domains/deny/exact", Scope.DENY, Kind.EXACT)
    DOMAINS_DENY_REGEX = ("/api/domains/deny/regex", Scope.DENY, Kind.REGEX)
    DOMAINS_DENY_ALL = ("/api/domains/deny", Scope.DENY, Kind.ANY)
    DOMAINS_ALL_EXACT = ("/api/domains/exact", Scope.ANY, Kind.EXACT)
    DOMAINS_ALL_REGEX = ("/api/domains/regex", Scope.ANY, Kind.REGEX)
    DOMAINS_ALL_ALL = ("/api/domains", Scope.ANY, Kind.ANY)

    def __init__(self, prefix: str, scope: Optional[Scope], kind: Optional[Kind]):
        self.prefix = prefix
        self.scope = scope
        self.kind = kind

    @property
    def is_domainlist(self) -> bool:
        return self.scope is not None

    @property
    def mutable(self) -> bool:
        if not self.is_domainlist:
            return True
        return self.scope is not Scope.ANY and self.kind is not Kind.ANY

    @property
    def response_key(self) -> str:
        if self is ListVariant.GROUPS:
            return "groups"
        if self is ListVariant.ADLISTS:
            return "adlists"
        # Clients share the domain list shape and key
        if self is ListVariant.CLIENTS or self.is_domainlist:
            return "domains"
        raise ValueError(f"Unhandled list variant: {self!r}")

    @property
    def type_codes(self) -> Tuple[int, ...]:
        """Stored ``domainlist.type`` values covered by this variant."""
        if not self.is_domainlist:
            return ()
        return tuple(
            code
            for (scope, kind), code in DOMAIN_TYPE_CODES.items()
            if self.scope in (Scope.ANY, scope) and self.kind in (Kind.ANY, kind)
        )

    @property
    def type_code(self) -> int:
        """The single ``domainlist.type`` value of a mutable domain list."""
        codes = self.type_codes
        if len(codes) != 1:
            raise ValueError(f"{self.name} does not address a single domain list type")
        return codes[0]


# Longest prefix first so sub-lists win over the list containing them.
ROUTING_ORDER = tuple(sorted(ListVariant, key=lambda v: len(v.prefix), reverse=True))


def parse_domain_type(value: Optional[str]) -> Optional[int]:
    """Map an ``allow/exact`` style label to its stored type code."""
    if not value:
        return None
    for code, label in DOMAIN_TYPE_NAMES.items():
        if label == value.strip().lower():
            return code
    return None


def resolve_list_path(path: str) -> Optional[Tuple[ListVariant, Optional[str]]]:
    """Resolve a request path into ``(variant, argument)``.

    The argument is whatever follows the matched prefix; ``None`` means the
    request addresses the whole collection. Returns ``None`` when no list
    prefix matches on a path-segment boundary.
    """
    for variant in ROUTING_ORDER:
        if not path.startswith(variant.prefix):
            continue
        rest = path[len(variant.prefix):]
        if rest and not rest.startswith("/"):
            continue
        argument = rest[1:]
        return variant, (argument or None)
    return None
