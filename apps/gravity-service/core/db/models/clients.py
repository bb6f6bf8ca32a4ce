from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey
from .base import Base, now_epoch


class Client(Base):
    __tablename__ = 'client'
    id = Column(Integer, primary_key=True, autoincrement=True)
    ip = Column(String, nullable=False, unique=True)  # IP, subnet, MAC or interface
    enabled = Column(Boolean, nullable=False, default=True)
    comment = Column(Text, nullable=True)
    date_added = Column(Integer, nullable=False, default=now_epoch)
    date_modified = Column(Integer, nullable=False, default=now_epoch, onupdate=now_epoch)


class ClientByGroup(Base):
    __tablename__ = 'client_by_group'
    client_id = Column(Integer, ForeignKey('client.id', ondelete='CASCADE'), primary_key=True)
    group_id = Column(Integer, ForeignKey('group.id', ondelete='CASCADE'), primary_key=True)
