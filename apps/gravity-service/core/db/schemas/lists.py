from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class ListItemBase(BaseModel):
    id: int
    enabled: bool
    date_added: int
    date_modified: int
    model_config = ConfigDict(frozen=True)


class GroupItem(ListItemBase):
    name: str
    description: Optional[str] = None


class AdlistItem(ListItemBase):
    address: str
    comment: Optional[str] = None


class DomainItem(ListItemBase):
    domain: str
    type: Optional[str] = None
    comment: Optional[str] = None
    groups: List[int] = []
