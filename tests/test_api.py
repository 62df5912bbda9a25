from datetime import timedelta

import pytest

API = "/api/v1"


@pytest.fixture
def members(make_member):
    make_member("amara", interests=["music", "hiking"], location="Kampala")
    make_member("bayo", interests=["music", "art"], location="Kampala")
    make_member("chidi", interests=["chess"], location="Accra")
    return "amara", "bayo", "chidi"


def test_requests_without_token_are_unauthorized(client):
    response = client.get(f"{API}/profiles/discover")
    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "UNAUTHORIZED"
    assert body["meta"]["request_id"]


def test_bad_and_expired_tokens_are_rejected(client, members, auth_headers):
    bad = client.get(f"{API}/matches", headers={"Authorization": "Bearer not-a-jwt"})
    assert bad.status_code == 401

    expired = client.get(f"{API}/matches", headers=auth_headers("amara", timedelta(hours=-1)))
    assert expired.status_code == 401
    assert expired.json()["error"]["message"] == "Token expired"


def test_token_for_unknown_user_is_rejected(client, auth_headers):
    response = client.get(f"{API}/matches", headers=auth_headers("nobody"))
    assert response.status_code == 401


def test_discover_returns_ranked_envelope(client, members, auth_headers):
    response = client.get(f"{API}/profiles/discover", headers=auth_headers("amara"))
    assert response.status_code == 200

    body = response.json()
    assert body["success"] is True
    items = body["data"]["items"]
    assert [item["user_id"] for item in items] == ["bayo", "chidi"]
    assert 0.0 <= items[1]["match_score"] <= items[0]["match_score"] <= 1.0
    assert body["data"]["pagination"]["total"] == 2


def test_discover_filters_from_query(client, members, auth_headers):
    response = client.get(
        f"{API}/profiles/discover",
        params={"location": "accra", "lookingFor": "ALL", "limit": 5},
        headers=auth_headers("amara"),
    )
    assert [item["user_id"] for item in response.json()["data"]["items"]] == ["chidi"]


def test_discover_rejects_bad_query(client, members, auth_headers):
    response = client.get(
        f"{API}/profiles/discover", params={"lookingFor": "NOPE"}, headers=auth_headers("amara")
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_discover_without_profile(client, make_user, auth_headers):
    make_user("newbie")
    response = client.get(f"{API}/profiles/discover", headers=auth_headers("newbie"))
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "PROFILE_NOT_FOUND"


def test_like_flow_over_http(client, members, auth_headers):
    first = client.post(f"{API}/profile/bayo/like", headers=auth_headers("amara"))
    assert first.status_code == 200
    assert first.json()["data"] == {"is_match": False, "match_id": None, "message": "Like recorded"}

    duplicate = client.post(f"{API}/profile/bayo/like", headers=auth_headers("amara"))
    assert duplicate.status_code == 409

    back = client.post(f"{API}/profile/amara/like", headers=auth_headers("bayo"))
    data = back.json()["data"]
    assert data["is_match"] is True
    assert data["match_id"]
    assert data["message"] == "It's a match!"

    matches = client.get(f"{API}/matches", headers=auth_headers("amara")).json()["data"]["matches"]
    assert [m["other_user"]["user_id"] for m in matches] == ["bayo"]
    assert matches[0]["match_id"] == data["match_id"]

    feed = client.get(f"{API}/profiles/discover", headers=auth_headers("amara")).json()["data"]
    assert [item["user_id"] for item in feed["items"]] == ["chidi"]


def test_self_like_is_bad_request(client, members, auth_headers):
    response = client.post(f"{API}/profile/amara/like", headers=auth_headers("amara"))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_ACTION"


def test_unlike_over_http(client, members, auth_headers):
    client.post(f"{API}/profile/bayo/like", headers=auth_headers("amara"))
    client.post(f"{API}/profile/amara/like", headers=auth_headers("bayo"))

    removed = client.delete(f"{API}/profile/bayo/like", headers=auth_headers("amara"))
    assert removed.status_code == 200
    assert removed.json()["data"]["message"] == "Like removed successfully"
    assert client.get(f"{API}/matches", headers=auth_headers("bayo")).json()["data"]["matches"] == []

    again = client.delete(f"{API}/profile/bayo/like", headers=auth_headers("amara"))
    assert again.status_code == 404
    assert again.json()["error"]["code"] == "LIKE_NOT_FOUND"


def test_likes_listing_by_type(client, members, auth_headers):
    client.post(f"{API}/profile/amara/like", headers=auth_headers("bayo"))
    client.post(f"{API}/profile/amara/like", headers=auth_headers("chidi"))

    received = client.get(f"{API}/likes", params={"type": "received"}, headers=auth_headers("amara"))
    data = received.json()["data"]
    assert data["type"] == "received"
    assert {entry["user"]["user_id"] for entry in data["likes"]} == {"bayo", "chidi"}

    given = client.get(f"{API}/likes", headers=auth_headers("amara")).json()["data"]
    assert given == {"likes": [], "type": "given"}

    bad = client.get(f"{API}/likes", params={"type": "sideways"}, headers=auth_headers("amara"))
    assert bad.status_code == 400


def test_suggestions(client, members, auth_headers):
    response = client.get(f"{API}/profiles/suggestions", params={"limit": 1}, headers=auth_headers("amara"))
    items = response.json()["data"]["items"]
    assert len(items) == 1
    assert items[0]["user_id"] != "amara"
    assert items[0]["match_score"] == 0.5


def test_profile_crud(client, make_user, auth_headers):
    make_user("dara")
    headers = auth_headers("dara")

    created = client.post(
        f"{API}/profile",
        json={"bio": "  ", "interests": ["jazz"], "lookingFor": "FRIENDSHIP"},
        headers=headers,
    )
    assert created.status_code == 201
    profile = created.json()["data"]
    assert profile["bio"] is None
    assert profile["looking_for"] == "FRIENDSHIP"
    assert profile["user"]["user_id"] == "dara"

    conflict = client.post(f"{API}/profile", json={}, headers=headers)
    assert conflict.status_code == 409

    updated = client.put(f"{API}/profile", json={"location": "Nairobi"}, headers=headers)
    assert updated.json()["data"]["location"] == "Nairobi"
    assert updated.json()["data"]["interests"] == ["jazz"]

    me = client.get(f"{API}/profile/me", headers=headers).json()["data"]
    assert me["profile_id"] == profile["profile_id"]

    deleted = client.delete(f"{API}/profile", headers=headers)
    assert deleted.json()["data"]["message"] == "Profile deleted successfully"
    assert client.get(f"{API}/profile/me", headers=headers).status_code == 404


def test_profile_validation(client, make_user, auth_headers):
    make_user("dara")
    response = client.post(
        f"{API}/profile", json={"interests": ["x" * 51]}, headers=auth_headers("dara")
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_unknown_route_uses_envelope(client):
    response = client.get(f"{API}/nowhere")
    assert response.status_code == 404
    assert response.json()["error"]["message"] == f"Route {API}/nowhere not found"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "healthy"
    assert data["database"] == "connected"
    assert data["environment"] == "test"


def test_discover_items_carry_score_breakdown(client, members, auth_headers):
    items = client.get(f"{API}/profiles/discover", headers=auth_headers("amara")).json()["data"]["items"]
    breakdown = items[0]["breakdown"]

    assert set(breakdown) == {"interests", "location", "intent", "recency"}
    assert breakdown["location"] == {"score": 0.3, "max": 0.3, "reasons": ["Same location"]}
    assert sum(p["score"] for p in breakdown.values()) == pytest.approx(items[0]["match_score"], abs=1e-4)


def test_suggestions_have_no_breakdown(client, members, auth_headers):
    items = client.get(f"{API}/profiles/suggestions", headers=auth_headers("amara")).json()["data"]["items"]
    assert all(item["breakdown"] is None for item in items)


def test_zero_limit_uses_default_page_size(client, members, auth_headers):
    response = client.get(f"{API}/profiles/discover", params={"limit": 0}, headers=auth_headers("amara"))
    assert response.status_code == 200
    assert response.json()["data"]["pagination"]["limit"] == 20
