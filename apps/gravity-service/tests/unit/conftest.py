import pytest

from core.db import models


@pytest.fixture
def make_group(db):
    def _create(name: str, enabled: bool = True, description: str = None):
        group = models.Group(name=name, enabled=enabled, description=description)
        db.add(group)
        db.commit()
        db.refresh(group)
        return group
    return _create
