from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, Index, UniqueConstraint, CheckConstraint
from .base import Base, now_epoch


class DomainListEntry(Base):
    __tablename__ = 'domainlist'
    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(Integer, nullable=False, default=0)  # 0 allow/exact, 1 deny/exact, 2 allow/regex, 3 deny/regex
    domain = Column(String, nullable=False)
    enabled = Column(Boolean, nullable=False, default=True)
    comment = Column(Text, nullable=True)
    date_added = Column(Integer, nullable=False, default=now_epoch)
    date_modified = Column(Integer, nullable=False, default=now_epoch, onupdate=now_epoch)

    __table_args__ = (
        UniqueConstraint('domain', 'type', name='uq_domainlist_domain_type'),
        Index('idx_domainlist_type', 'type'),
        CheckConstraint("type in (0, 1, 2, 3)", name='ck_domainlist_type'),
    )


class DomainListByGroup(Base):
    __tablename__ = 'domainlist_by_group'
    domainlist_id = Column(Integer, ForeignKey('domainlist.id', ondelete='CASCADE'), primary_key=True)
    group_id = Column(Integer, ForeignKey('group.id', ondelete='CASCADE'), primary_key=True)
