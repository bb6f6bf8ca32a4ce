"""
Gravity database models with a compatibility aggregator.

Exposes ``Base``, ``now_epoch`` and every ORM class of the gravity schema.
"""

from .base import Base, now_epoch  # re-export

from .groups import Group
from .adlists import Adlist, AdlistByGroup
from .clients import Client, ClientByGroup
from .domains import DomainListEntry, DomainListByGroup

__all__ = [
    # base
    "Base",
    "now_epoch",
    # lists
    "Group",
    "Adlist",
    "AdlistByGroup",
    "Client",
    "ClientByGroup",
    "DomainListEntry",
    "DomainListByGroup",
]
