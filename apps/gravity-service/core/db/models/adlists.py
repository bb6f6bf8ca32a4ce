from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey
from .base import Base, now_epoch


class Adlist(Base):
    __tablename__ = 'adlist'
    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(String, nullable=False, unique=True)
    enabled = Column(Boolean, nullable=False, default=True)
    comment = Column(Text, nullable=True)
    date_added = Column(Integer, nullable=False, default=now_epoch)
    date_modified = Column(Integer, nullable=False, default=now_epoch, onupdate=now_epoch)


class AdlistByGroup(Base):
    __tablename__ = 'adlist_by_group'
    adlist_id = Column(Integer, ForeignKey('adlist.id', ondelete='CASCADE'), primary_key=True)
    group_id = Column(Integer, ForeignKey('group.id', ondelete='CASCADE'), primary_key=True)
