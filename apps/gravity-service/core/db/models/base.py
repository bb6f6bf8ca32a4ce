"""
Shared SQLAlchemy base and helpers.
"""
import time
from sqlalchemy.orm import declarative_base


def now_epoch():
    """Return the current UNIX time in whole seconds for date_added/date_modified."""
    return int(time.time())


Base = declarative_base()
