from sqlalchemy import Column, Integer, String, Text, Boolean
from .base import Base, now_epoch


class Group(Base):
    __tablename__ = 'group'
    id = Column(Integer, primary_key=True, autoincrement=True)
    enabled = Column(Boolean, nullable=False, default=True)
    name = Column(String, nullable=False, unique=True)
    description = Column(Text, nullable=True)
    date_added = Column(Integer, nullable=False, default=now_epoch)
    date_modified = Column(Integer, nullable=False, default=now_epoch, onupdate=now_epoch)
