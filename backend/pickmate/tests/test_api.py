"""
Tests for the HTTP API: couples, decisions, public voting and live results.
"""
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect
from pickmate.core.config import settings
from pickmate.main import app


def create_decision(client, headers, title="Dinner", options=("Pizza", "Sushi", "Tacos")):
    response = client.post(
        "/api/decisions",
        json={"title": title, "category": "food", "options": [{"title": t} for t in options]},
        headers=headers
    )
    assert response.status_code == 201
    return response.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_couple_lifecycle(client, auth_headers):
    alice = auth_headers("alice@example.com", "Alice")
    bob = auth_headers("bob@example.com", "Bob")
    carol = auth_headers("carol@example.com", "Carol")

    assert client.get("/api/couples/me", headers=alice).status_code == 404

    created = client.post("/api/couples", headers=alice)
    assert created.status_code == 201
    code = created.json()["invite_code"]
    assert len(code) == 6

    joined = client.post("/api/couples/join", json={"invite_code": code.lower()}, headers=bob)
    assert joined.status_code == 200
    assert joined.json()["partner"]["display_name"] == "Alice"
    assert len(joined.json()["member_ids"]) == 2

    full = client.post("/api/couples/join", json={"invite_code": code}, headers=carol)
    assert full.status_code == 409
    assert full.json()["detail"] == "This couple already has two members"

    mine = client.get("/api/couples/me", headers=alice).json()
    assert mine["partner"]["display_name"] == "Bob"

    assert client.delete("/api/couples/me", headers=bob).status_code == 200
    assert client.get("/api/couples/me", headers=bob).status_code == 404
    after = client.get("/api/couples/me", headers=alice).json()
    assert after["invite_code"] == code
    assert after["partner"] is None


def test_join_errors(client, auth_headers):
    headers = auth_headers("dave@example.com")

    bad = client.post("/api/couples/join", json={"invite_code": "ABC"}, headers=headers)
    assert bad.status_code == 400

    missing = client.post("/api/couples/join", json={"invite_code": "QQQQQQ"}, headers=headers)
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Invalid invite code"

    assert client.delete("/api/couples/me", headers=headers).status_code == 404


def test_couple_routes_require_auth(client):
    assert client.post("/api/couples").status_code == 401
    assert client.get("/api/decisions").status_code == 401


def test_decision_flow(client, auth_headers):
    alice = auth_headers("alice@example.com", "Alice")
    bob = auth_headers("bob@example.com", "Bob")
    code = client.post("/api/couples", headers=alice).json()["invite_code"]
    client.post("/api/couples/join", json={"invite_code": code}, headers=bob)

    decision = create_decision(client, alice)
    assert decision["status"] == "open"
    assert [o["title"] for o in decision["options"]] == ["Pizza", "Sushi", "Tacos"]
    decision_id = decision["id"]
    pizza, sushi, tacos = [o["id"] for o in decision["options"]]

    listed = client.get("/api/decisions", headers=bob).json()
    assert [d["id"] for d in listed] == [decision_id]

    for title in ("Curry", "Pho"):
        added = client.post(f"/api/decisions/{decision_id}/options", json={"title": title}, headers=bob)
        assert added.status_code == 201
    capped = client.post(f"/api/decisions/{decision_id}/options", json={"title": "Burger"}, headers=bob)
    assert capped.status_code == 400

    client.put(f"/api/decisions/{decision_id}/options/{sushi}/rating", json={"stars": 3}, headers=alice)
    client.put(f"/api/decisions/{decision_id}/options/{pizza}/rating", json={"stars": 2}, headers=alice)
    client.put(f"/api/decisions/{decision_id}/options/{sushi}/rating", json={"stars": 1}, headers=bob)
    client.put(f"/api/decisions/{decision_id}/options/{sushi}/rating", json={"stars": 3}, headers=bob)

    mine = client.get(f"/api/decisions/{decision_id}/ratings/me", headers=bob).json()
    assert mine["ratings"][str(sushi)] == 3
    assert mine["ratings"][str(tacos)] == 0

    results = client.get(f"/api/decisions/{decision_id}/results", headers=alice).json()
    assert results["winner_id"] == sushi
    assert [r["option_id"] for r in results["ranking"]][:3] == [sushi, pizza, tacos]
    assert results["ranking"][0]["total_stars"] == 6
    assert results["ranking"][0]["voter_count"] == 2
    assert results["total_voters"] == 2

    invalid = client.put(f"/api/decisions/{decision_id}/options/{pizza}/rating", json={"stars": 4}, headers=alice)
    assert invalid.status_code == 422

    closed = client.patch(f"/api/decisions/{decision_id}/status", json={"status": "closed"}, headers=bob)
    assert closed.json()["status"] == "closed"
    late = client.put(f"/api/decisions/{decision_id}/options/{tacos}/rating", json={"stars": 1}, headers=bob)
    assert late.status_code == 400
    frozen = client.delete(f"/api/decisions/{decision_id}/options/{tacos}", headers=bob)
    assert frozen.status_code == 400

    archived = client.patch(f"/api/decisions/{decision_id}/status", json={"status": "archived"}, headers=alice)
    assert archived.json()["status"] == "archived"
    reopened = client.patch(f"/api/decisions/{decision_id}/status", json={"status": "open"}, headers=alice)
    assert reopened.status_code == 400

    assert client.delete(f"/api/decisions/{decision_id}", headers=alice).status_code == 200
    assert client.get(f"/api/decisions/{decision_id}", headers=bob).status_code == 404


def test_decision_forbidden_for_outsiders(client, auth_headers):
    owner = auth_headers("owner@example.com")
    outsider = auth_headers("outsider@example.com")
    decision = create_decision(client, owner)

    assert client.get(f"/api/decisions/{decision['id']}", headers=outsider).status_code == 403
    assert client.get(f"/api/decisions/{decision['id']}/results", headers=outsider).status_code == 403


def test_public_voting_link(client, auth_headers):
    owner = auth_headers("owner@example.com")
    decision = create_decision(client, owner)
    decision_id = decision["id"]
    pizza, sushi, _ = [o["id"] for o in decision["options"]]

    opened = client.get(f"/api/vote/{decision_id}")
    assert opened.status_code == 200
    assert opened.json()["ratings"] == {}
    assert opened.json()["completed"] is False
    assert [o["title"] for o in opened.json()["options"]] == ["Pizza", "Sushi", "Tacos"]
    voter_id = client.cookies.get(settings.VOTER_COOKIE_NAME)
    assert voter_id

    first = client.put(f"/api/vote/{decision_id}/options/{sushi}", json={"stars": 3})
    assert first.json()["voter_id"] == voter_id
    client.put(f"/api/vote/{decision_id}/options/{sushi}", json={"stars": 2})
    client.put(f"/api/vote/{decision_id}/options/{pizza}", json={"stars": 1})

    resumed = client.get(f"/api/vote/{decision_id}").json()
    assert resumed["ratings"] == {str(sushi): 2, str(pizza): 1}

    done = client.post(f"/api/vote/{decision_id}/done").json()
    assert done == {"decision_id": decision_id, "title": "Dinner", "completed": True, "rated_count": 2}
    assert client.get(f"/api/vote/{decision_id}/done").json()["completed"] is True

    other_voter = TestClient(app)
    other_voter.put(f"/api/vote/{decision_id}/options/{sushi}", json={"stars": 3})
    assert other_voter.cookies.get(settings.VOTER_COOKIE_NAME) != voter_id

    results = client.get(f"/api/decisions/{decision_id}/results", headers=owner).json()
    assert results["ranking"][0]["option_id"] == sushi
    assert results["ranking"][0]["total_stars"] == 5
    assert results["ranking"][0]["voter_count"] == 2
    assert results["total_voters"] == 2


def test_public_voting_errors(client, auth_headers):
    owner = auth_headers("owner@example.com")
    decision = create_decision(client, owner)
    option_id = decision["options"][0]["id"]

    assert client.get("/api/vote/9999").status_code == 404
    assert client.put(f"/api/vote/{decision['id']}/options/9999", json={"stars": 2}).status_code == 404
    assert client.put(f"/api/vote/{decision['id']}/options/{option_id}", json={"stars": 0}).status_code == 422


def test_live_results(client, auth_headers):
    owner = auth_headers("owner@example.com")
    token = owner["Authorization"].split(" ", 1)[1]
    decision = create_decision(client, owner)
    decision_id = decision["id"]
    tacos = decision["options"][2]["id"]

    with client.websocket_connect(f"/api/ws/decisions/{decision_id}/results?token={token}") as ws:
        initial = ws.receive_json()
        assert initial["winner_id"] is None
        assert initial["total_stars"] == 0

        client.put(f"/api/vote/{decision_id}/options/{tacos}", json={"stars": 3})
        update = ws.receive_json()
        assert update["winner_id"] == tacos
        assert update["ranking"][0]["total_stars"] == 3


def test_live_results_requires_access(client, auth_headers):
    owner = auth_headers("owner@example.com")
    outsider = auth_headers("outsider@example.com")
    decision = create_decision(client, owner)
    outsider_token = outsider["Authorization"].split(" ", 1)[1]

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/api/ws/decisions/{decision['id']}/results"):
            pass
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(
            f"/api/ws/decisions/{decision['id']}/results?token={outsider_token}"
        ):
            pass
