from contextlib import contextmanager

import pytest

from core.db.repositories import gravity
from core.db.repositories.gravity import StoreError, TableRow


def _error(resp):
    body = resp.json()
    assert set(body["error"]) == {"code", "key", "message", "data"}
    assert body["error"]["code"] == resp.status_code
    return body["error"]


@pytest.mark.parametrize(
    "path,key",
    [
        ("/api/groups", "groups"),
        ("/api/adlists", "adlists"),
        ("/api/clients", "domains"),
        ("/api/domains", "domains"),
        ("/api/domains/allow", "domains"),
        ("/api/domains/deny/regex", "domains"),
        ("/api/domains/exact", "domains"),
    ],
)
def test_empty_collections_use_variant_key(client, path, key):
    resp = client.get(path)
    assert resp.status_code == 200
    assert resp.json() == {key: []}


def test_post_then_get_domain(client):
    resp = client.post("/api/domains/allow/exact/foo.com", json={"enabled": True, "comment": "x"})
    assert resp.status_code == 201
    (item,) = resp.json()["domains"]
    assert item["domain"] == "foo.com"
    assert item["type"] == "allow/exact"
    assert item["comment"] == "x"
    assert item["enabled"] is True
    assert item["groups"] == []
    assert isinstance(item["date_added"], int)

    listed = client.get("/api/domains/allow/exact").json()["domains"]
    assert [d["domain"] for d in listed] == ["foo.com"]
    assert client.get("/api/domains/deny").json() == {"domains": []}


def test_put_is_repeatable(client):
    payload = {"enabled": False, "comment": "twice"}
    first = client.put("/api/adlists/lists.example.com/hosts.txt", json=payload)
    second = client.put("/api/adlists/lists.example.com/hosts.txt", json=payload)
    assert first.status_code == 200
    assert second.status_code == 200
    assert first.json() == second.json()
    (item,) = second.json()["adlists"]
    assert item["address"] == "lists.example.com/hosts.txt"
    assert item["enabled"] is False


@pytest.mark.parametrize("payload", [{}, {"enabled": "yes"}, {"enabled": 1}, {"comment": "no flag"}])
def test_write_requires_enabled_boolean(client, payload):
    resp = client.post("/api/domains/deny/exact/bad.com", json=payload)
    assert resp.status_code == 400
    err = _error(resp)
    assert err["key"] == "bad_request"
    assert "enabled" in err["message"]
    assert client.get("/api/domains").json() == {"domains": []}


@pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b""])
def test_write_rejects_non_object_body(client, body):
    resp = client.post(
        "/api/groups/family", content=body, headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert _error(resp)["key"] == "bad_request"


def test_delete_then_delete_again(client):
    client.post("/api/domains/deny/regex/tracker", json={"enabled": True})
    resp = client.delete("/api/domains/deny/regex/tracker")
    assert resp.status_code == 204
    assert resp.content == b""

    again = client.delete("/api/domains/deny/regex/tracker")
    assert again.status_code == 400
    err = _error(again)
    assert err["key"] == "database_error"
    assert err["message"] == "Could not remove domain from database table"
    assert err["data"] == {"argument": "tracker", "sql_msg": gravity.ITEM_NOT_FOUND}


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE", "PATCH"])
@pytest.mark.parametrize("path", ["/api/domains/x.com", "/api/domains/allow/x.com", "/api/domains/regex/x"])
def test_aggregate_lists_are_read_only(client, monkeypatch, method, path):
    def _store_must_not_be_called(*args, **kwargs):
        raise AssertionError("store touched for a read-only list")

    monkeypatch.setattr(gravity, "add_to_table", _store_must_not_be_called)
    monkeypatch.setattr(gravity, "delete_from_table", _store_must_not_be_called)

    resp = client.request(method, path, json={"enabled": True})
    assert resp.status_code == 400
    err = _error(resp)
    assert err["key"] == "bad_request"
    assert err["message"] == "Invalid request: Specify list to modify"


@pytest.mark.parametrize("method", ["POST", "PUT", "DELETE"])
def test_mutation_without_item(client, method):
    resp = client.request(method, "/api/clients", json={"enabled": True})
    assert resp.status_code == 400
    assert _error(resp)["message"] == "Invalid request: Specify item to modify"


def test_patch_on_mutable_list_is_not_found(client):
    resp = client.patch("/api/groups/family", json={"enabled": True})
    assert resp.status_code == 404
    assert _error(resp)["key"] == "not_found"


@pytest.mark.parametrize("method", ["OPTIONS", "TRACE"])
def test_unsupported_verbs_are_not_found(client, method):
    resp = client.request(method, "/api/groups/family")
    assert resp.status_code == 404
    assert _error(resp)["key"] == "not_found"


def test_head_is_not_found(client):
    assert client.head("/api/groups").status_code == 404


def test_unsupported_verb_on_read_only_list(client):
    resp = client.options("/api/domains")
    assert resp.status_code == 400
    assert _error(resp)["message"] == "Invalid request: Specify list to modify"


@pytest.mark.parametrize("path", ["/api/unknown", "/api/groupsx", "/api/"])
def test_unknown_paths(client, path):
    resp = client.get(path)
    assert resp.status_code == 404
    assert _error(resp)["key"] == "not_found"


def test_unrecognised_sublist_is_an_item_of_the_parent(client):
    client.post("/api/domains/allow/exact/allowed", json={"enabled": True})
    (item,) = client.get("/api/domains/allowed").json()["domains"]
    assert item["domain"] == "allowed"


def test_post_conflict_echoes_submitted_fields(client):
    client.post("/api/groups/family", json={"enabled": True})
    resp = client.post("/api/groups/family", json={"enabled": False, "description": "dup"})
    assert resp.status_code == 400
    err = _error(resp)
    assert err["key"] == "database_error"
    assert err["message"] == "Could not add to gravity database"
    assert err["data"]["argument"] == "family"
    assert err["data"]["enabled"] is False
    assert err["data"]["description"] == "dup"
    assert "UNIQUE" in err["data"]["sql_msg"]


def test_unknown_group_keeps_row_write(client):
    resp = client.post("/api/domains/deny/exact/orphan.com", json={"enabled": True, "groups": [4242]})
    assert resp.status_code == 400
    err = _error(resp)
    assert err["key"] == "database_error"
    assert "FOREIGN KEY" in err["data"]["sql_msg"]

    (item,) = client.get("/api/domains/deny/exact/orphan.com").json()["domains"]
    assert item["groups"] == []


def test_domain_groups_round_trip(client):
    g1 = client.post("/api/groups/one", json={"enabled": True}).json()["groups"][0]["id"]
    g2 = client.post("/api/groups/two", json={"enabled": True}).json()["groups"][0]["id"]

    resp = client.put("/api/domains/allow/regex/cdn", json={"enabled": True, "groups": [g2, g1, g2]})
    assert resp.status_code == 200
    (item,) = resp.json()["domains"]
    assert sorted(item["groups"]) == sorted([g1, g2])

    resp = client.put("/api/domains/allow/regex/cdn", json={"enabled": True, "groups": []})
    assert resp.json()["domains"][0]["groups"] == []


def test_put_without_groups_keeps_membership(client):
    gid = client.post("/api/groups/office", json={"enabled": True}).json()["groups"][0]["id"]
    client.post("/api/clients/192.168.1.20", json={"enabled": True, "groups": [gid]})

    resp = client.put("/api/clients/192.168.1.20", json={"enabled": False, "comment": "printer"})
    (item,) = resp.json()["domains"]
    assert item == {
        "id": item["id"],
        "domain": "192.168.1.20",
        "type": None,
        "comment": "printer",
        "groups": [gid],
        "enabled": False,
        "date_added": item["date_added"],
        "date_modified": item["date_modified"],
    }


def test_groups_payload_on_groups_list(client):
    resp = client.post("/api/groups/nested", json={"enabled": True, "groups": [1]})
    assert resp.status_code == 400
    assert _error(resp)["key"] == "database_error"


def test_put_renames_group(client):
    client.post("/api/groups/kids", json={"enabled": True})
    resp = client.put("/api/groups/kids", json={"enabled": True, "name": "children", "description": "under 12"})
    assert resp.status_code == 200
    (item,) = resp.json()["groups"]
    assert item["name"] == "children"
    assert item["description"] == "under 12"
    assert client.get("/api/groups/kids").json() == {"groups": []}


def test_put_oldtype_moves_domain(client):
    client.post("/api/domains/deny/exact/flip.com", json={"enabled": True})
    resp = client.put("/api/domains/allow/exact/flip.com", json={"enabled": True, "oldtype": "deny/exact"})
    assert resp.status_code == 200
    assert resp.json()["domains"][0]["type"] == "allow/exact"
    assert client.get("/api/domains/deny").json() == {"domains": []}


class _FakeCursor:
    def __init__(self, rows, fail_with=None):
        self._rows = rows
        self._fail_with = fail_with
        self.sql_msg = None
        self.closed = False
        self.drained = False

    def __iter__(self):
        yield from self._rows
        self.sql_msg = self._fail_with
        self.drained = True


def _install_fake_table(monkeypatch, cursor):
    @contextmanager
    def _open_table(db, variant, argument=None):
        try:
            yield cursor
        finally:
            cursor.closed = True

    monkeypatch.setattr(gravity, "open_table", _open_table)


def _domain_row(row_id, group_ids=None):
    return TableRow(
        id=row_id, enabled=True, date_added=1, date_modified=1,
        domain=f"d{row_id}.com", type=1, group_ids=group_ids,
    )


def test_read_discards_partial_results(client, monkeypatch):
    cursor = _FakeCursor([_domain_row(1), _domain_row(2)], fail_with="disk I/O error")
    _install_fake_table(monkeypatch, cursor)

    resp = client.get("/api/domains/deny/exact")
    assert resp.status_code == 400
    err = _error(resp)
    assert err["message"] == "Could not read from gravity database"
    assert err["data"] == {"argument": None, "sql_msg": "disk I/O error"}
    assert "domains" not in resp.json()
    assert cursor.closed


def test_read_rejects_malformed_group_aggregate(client, monkeypatch):
    cursor = _FakeCursor([_domain_row(1, "1,2"), _domain_row(2, "1,x"), _domain_row(3, "4")])
    _install_fake_table(monkeypatch, cursor)

    resp = client.get("/api/domains")
    assert resp.status_code == 400
    assert _error(resp)["key"] == "database_error"
    assert "1,x" in _error(resp)["data"]["sql_msg"]
    assert cursor.drained
    assert cursor.closed


def test_read_success_closes_cursor(client, monkeypatch):
    cursor = _FakeCursor([_domain_row(7, "3,1")])
    _install_fake_table(monkeypatch, cursor)

    resp = client.get("/api/domains/deny/exact")
    assert resp.status_code == 200
    assert resp.json()["domains"][0]["groups"] == [3, 1]
    assert cursor.closed


def test_read_open_failure(client, monkeypatch):
    @contextmanager
    def _open_table(db, variant, argument=None):
        raise StoreError("no such table: domainlist")
        yield

    monkeypatch.setattr(gravity, "open_table", _open_table)

    resp = client.get("/api/domains/allow/exact/foo.com")
    assert resp.status_code == 400
    err = _error(resp)
    assert err["message"] == "Could not read domains from database table"
    assert err["data"] == {"argument": "foo.com", "sql_msg": "no such table: domainlist"}
