import pytest

from core.db.repositories.gravity import TableRow
from core.db.row_codec import MalformedGroupAggregate, parse_group_ids, project_row
from core.utils.list_types import ListVariant


def _row(**kw):
    base = dict(id=7, enabled=1, date_added=1700000000, date_modified=1700000100)
    base.update(kw)
    return TableRow(**base)


def test_group_aggregate_reconstruction():
    assert parse_group_ids("1,2,3") == [1, 2, 3]
    assert parse_group_ids("0") == [0]
    assert parse_group_ids(None) == []


@pytest.mark.parametrize("raw", ["", "1,,2", "1,2,", "1; DROP", "[1]", " 1", "01"])
def test_malformed_group_aggregate_is_rejected(raw):
    with pytest.raises(MalformedGroupAggregate):
        parse_group_ids(raw)


def test_project_group():
    item = project_row(ListVariant.GROUPS, _row(name="Default", description=None, group_ids="1"))
    assert item == {
        "id": 7,
        "name": "Default",
        "description": None,
        "enabled": True,
        "date_added": 1700000000,
        "date_modified": 1700000100,
    }


def test_project_adlist():
    item = project_row(ListVariant.ADLISTS, _row(address="https://example.com/hosts", comment="main"))
    assert item["address"] == "https://example.com/hosts"
    assert item["comment"] == "main"
    assert "groups" not in item
    assert "domain" not in item


def test_project_client():
    item = project_row(ListVariant.CLIENTS, _row(ip="10.0.0.1", group_ids="2,5"))
    assert item["domain"] == "10.0.0.1"
    assert item["type"] is None
    assert "client" not in item
    assert item["comment"] is None
    assert item["groups"] == [2, 5]


def test_project_domain_has_type_label_and_empty_groups():
    item = project_row(ListVariant.DOMAINS_ALL_ALL, _row(domain="foo.com", type=3, comment=None, group_ids=None))
    assert item["domain"] == "foo.com"
    assert item["type"] == "deny/regex"
    assert item["groups"] == []
    assert item["comment"] is None
    assert item["enabled"] is True
