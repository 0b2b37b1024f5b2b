"""
Tests for the HTTP API
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from eventseat.services.repositories import InMemoryGuestStore, StorageError

@pytest.fixture
def store():
    return InMemoryGuestStore()

@pytest.fixture
def client(store):
    with TestClient(create_app(store=store)) as test_client:
        yield test_client

@pytest.fixture
def event_id(client):
    response = client.post("/events", json={"name": "Wedding", "date": "2025-01-01"})
    return response.json()["id"]

def add_guest(client, event_id, **body):
    return client.post(f"/events/{event_id}/guests", json=body)

# -------- events --------

def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

def test_create_event(client):
    response = client.post("/events", json={
        "name": "Wedding",
        "date": "2025-01-01",
        "themeColor": "#336699",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["id"]
    assert data["name"] == "Wedding"
    assert data["themeColor"] == "#336699"
    assert data["guests"] == []
    assert "createdAt" in data
    assert "logo" not in data

@pytest.mark.parametrize("body", [
    {"date": "2025-01-01"},
    {"name": "Wedding"},
    {"name": "  ", "date": "2025-01-01"},
    {},
])
def test_create_event_requires_name_and_date(client, body):
    response = client.post("/events", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Event name and date are required"}

def test_create_event_malformed_json(client):
    response = client.post(
        "/events",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to parse request body"}

def test_list_events(client, event_id):
    client.post("/events", json={"name": "Party", "date": "2025-02-01"})
    response = client.get("/events")

    assert response.status_code == 200
    assert [e["name"] for e in response.json()] == ["Wedding", "Party"]

def test_get_event(client, event_id):
    response = client.get(f"/events/{event_id}")
    assert response.status_code == 200
    assert response.json()["id"] == event_id

def test_get_event_not_found(client):
    response = client.get("/events/unknown")
    assert response.status_code == 404
    assert response.json() == {"error": "Event not found"}

def test_update_event(client, event_id):
    response = client.patch(f"/events/{event_id}", json={"name": "Reception", "logo": "logo.png"})

    assert response.status_code == 200
    assert response.json()["name"] == "Reception"
    assert response.json()["logo"] == "logo.png"
    assert response.json()["date"] == "2025-01-01"

def test_update_event_rejects_blank_name(client, event_id):
    response = client.patch(f"/events/{event_id}", json={"name": ""})
    assert response.status_code == 400

def test_update_event_not_found(client):
    assert client.patch("/events/unknown", json={"name": "X"}).status_code == 404

def test_qr_code(client, event_id):
    response = client.get(f"/events/{event_id}/qr.png")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")

def test_qr_code_not_found(client):
    assert client.get("/events/unknown/qr.png").status_code == 404

# -------- guests --------

def test_add_guest(client, event_id):
    response = add_guest(client, event_id, name="John Smith", tableNumber=5, seatNumber="A")

    assert response.status_code == 201
    data = response.json()
    assert data["id"]
    assert data["name"] == "John Smith"
    assert data["tableNumber"] == 5
    assert data["seatNumber"] == "A"

def test_add_guest_parses_string_table_number(client, event_id):
    response = add_guest(client, event_id, name="John", tableNumber="7")
    assert response.status_code == 201
    assert response.json()["tableNumber"] == 7
    assert "seatNumber" not in response.json()

@pytest.mark.parametrize("body", [
    {"tableNumber": 1},
    {"name": "John"},
    {"name": "", "tableNumber": 1},
])
def test_add_guest_requires_name_and_table(client, event_id, body):
    response = client.post(f"/events/{event_id}/guests", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Guest name and table number are required"}

@pytest.mark.parametrize("table", ["x", 0, -1, "2.5", "99999999999999999999"])
def test_add_guest_rejects_bad_table_number(client, event_id, table):
    response = add_guest(client, event_id, name="John", tableNumber=table)
    assert response.status_code == 400
    assert response.json() == {"error": "Table number must be a positive integer"}

def test_add_guest_event_not_found(client):
    response = add_guest(client, "unknown", name="John", tableNumber=1)
    assert response.status_code == 404
    assert response.json() == {"error": "Event not found"}

def test_search_scenario(client, event_id):
    guest = add_guest(client, event_id, name="John Smith", tableNumber=5).json()

    response = client.get(f"/events/{event_id}/guests", params={"search": "john"})
    assert response.status_code == 200
    assert response.json() == [guest]

    response = client.get(f"/events/{event_id}/guests", params={"search": "zzz"})
    assert response.json() == []

def test_search_ranks_substring_matches_first(client, event_id):
    add_guest(client, event_id, name="Jon Snow", tableNumber=1)
    add_guest(client, event_id, name="Jonas Kahnwald", tableNumber=2)

    response = client.get(f"/events/{event_id}/guests", params={"search": "jonas"})
    assert [g["name"] for g in response.json()] == ["Jonas Kahnwald", "Jon Snow"]

def test_search_whitespace_term_returns_everyone(client, event_id):
    add_guest(client, event_id, name="A", tableNumber=1)
    add_guest(client, event_id, name="B", tableNumber=1)

    response = client.get(f"/events/{event_id}/guests", params={"search": "   "})
    assert [g["name"] for g in response.json()] == ["A", "B"]

@pytest.mark.parametrize("params", [{}, {"search": ""}])
def test_search_requires_term(client, event_id, params):
    response = client.get(f"/events/{event_id}/guests", params=params)
    assert response.status_code == 400
    assert response.json() == {"error": "Search term is required"}

def test_search_event_not_found(client):
    response = client.get("/events/unknown/guests", params={"search": "john"})
    assert response.status_code == 404

def test_update_guest(client, event_id):
    guest = add_guest(client, event_id, name="John", tableNumber=1, seatNumber="2").json()

    response = client.patch(
        f"/events/{event_id}/guests/{guest['id']}",
        json={"tableNumber": "3", "seatNumber": ""},
    )
    assert response.status_code == 200
    assert response.json()["tableNumber"] == 3
    assert "seatNumber" not in response.json()
    assert response.json()["name"] == "John"

def test_update_guest_validation(client, event_id):
    guest = add_guest(client, event_id, name="John", tableNumber=1).json()
    url = f"/events/{event_id}/guests/{guest['id']}"

    assert client.patch(url, json={"tableNumber": "x"}).status_code == 400
    assert client.patch(url, json={"name": " "}).status_code == 400

def test_update_guest_not_found(client, event_id):
    response = client.patch(f"/events/{event_id}/guests/unknown", json={"name": "X"})
    assert response.status_code == 404
    assert response.json() == {"error": "Guest not found"}

def test_delete_guest(client, event_id):
    guest = add_guest(client, event_id, name="John", tableNumber=1).json()
    url = f"/events/{event_id}/guests/{guest['id']}"

    response = client.delete(url)
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = client.delete(url)
    assert response.status_code == 404
    assert response.json() == {"error": "Guest not found"}

    assert client.get(f"/events/{event_id}").json()["guests"] == []

# -------- bulk --------

def test_bulk_add_partial_success(client, event_id):
    response = client.post(f"/events/{event_id}/guests/bulk", json={"guests": [
        {"name": "A", "tableNumber": "1"},
        {"name": "", "tableNumber": "2"},
        {"name": "B", "tableNumber": "x"},
    ]})

    assert response.status_code == 201
    data = response.json()
    assert [g["name"] for g in data["added"]] == ["A"]
    assert data["errors"] == [
        "Row 2: Missing guest name",
        'Row 3: Invalid table number "x"',
    ]
    assert data["summary"] == {"total": 3, "added": 1, "errors": 2}

    guests = client.get(f"/events/{event_id}").json()["guests"]
    assert [g["name"] for g in guests] == ["A"]

@pytest.mark.parametrize("body", [{}, {"guests": "A,B"}, {"guests": {"name": "A"}}])
def test_bulk_add_requires_array(client, event_id, body):
    response = client.post(f"/events/{event_id}/guests/bulk", json=body)
    assert response.status_code == 400
    assert response.json() == {"error": "Guests must be an array"}

def test_bulk_add_event_not_found(client):
    response = client.post("/events/unknown/guests/bulk", json={"guests": []})
    assert response.status_code == 404

# -------- error handling --------

def test_storage_failure_returns_500(client, store, monkeypatch):
    def broken(*args, **kwargs):
        raise StorageError("disk full")

    monkeypatch.setattr(store, "create_event", broken)
    response = client.post("/events", json={"name": "Wedding", "date": "2025-01-01"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create event"}

def test_unknown_route_uses_error_body(client):
    response = client.get("/nowhere")
    assert response.status_code == 404
    assert "error" in response.json()

def test_bulk_add_reports_rows_committed_before_storage_failure(client, store, event_id, monkeypatch):
    real_add_guest = store.add_guest
    calls = []

    def flaky_add_guest(*args, **kwargs):
        calls.append(kwargs["name"])
        if len(calls) == 2:
            raise StorageError("disk full")
        return real_add_guest(*args, **kwargs)

    monkeypatch.setattr(store, "add_guest", flaky_add_guest)
    response = client.post(f"/events/{event_id}/guests/bulk", json={"guests": [
        {"name": "A", "tableNumber": 1},
        {"name": "B", "tableNumber": 2},
        {"name": "C", "tableNumber": 3},
    ]})

    assert response.status_code == 201
    data = response.json()
    assert [g["name"] for g in data["added"]] == ["A", "C"]
    assert data["errors"] == ['Row 2: Failed to add guest "B"']
    assert data["summary"] == {"total": 3, "added": 2, "errors": 1}
    assert [g.name for g in store.get_event(event_id).guests] == ["A", "C"]

def test_search_reads_event_once(client, store, event_id, monkeypatch):
    add_guest(client, event_id, name="John Smith", tableNumber=5)
    real_get_event = store.get_event
    reads = []

    def counting_get_event(*args, **kwargs):
        reads.append(args)
        return real_get_event(*args, **kwargs)

    monkeypatch.setattr(store, "get_event", counting_get_event)
    response = client.get(f"/events/{event_id}/guests", params={"search": "john"})

    assert [g["name"] for g in response.json()] == ["John Smith"]
    assert len(reads) == 1

def test_sql_store_rejects_oversized_table_number(tmp_path):
    from eventseat.core.db import make_session_factory
    from eventseat.services.repositories import SqlGuestStore

    store = SqlGuestStore(make_session_factory(f"sqlite:///{tmp_path / 'api.db'}"))
    with TestClient(create_app(store=store)) as sql_client:
        event_id = sql_client.post("/events", json={"name": "Wedding", "date": "2025-01-01"}).json()["id"]
        response = add_guest(sql_client, event_id, name="John", tableNumber="99999999999999999999")

    assert response.status_code == 400
    assert response.json() == {"error": "Table number must be a positive integer"}
