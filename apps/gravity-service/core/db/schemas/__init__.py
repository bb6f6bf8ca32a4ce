"""
Pydantic schemas for the list API projections.
"""

from .lists import ListItemBase, GroupItem, AdlistItem, DomainItem

__all__ = [
    "ListItemBase",
    "GroupItem",
    "AdlistItem",
    "DomainItem",
]
