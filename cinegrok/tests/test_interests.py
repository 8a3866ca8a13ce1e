"""Tests for interested profiles and the collaboration interest tracker"""
import uuid

INTERESTS = "/api/interested-profiles"
TRACKER = "/api/v1/collaboration-interests"


def test_interests_require_auth(client):
    assert client.get(INTERESTS).status_code == 401
    assert client.post(INTERESTS, json={"filmmakerId": "x"}).status_code == 401
    assert client.get(TRACKER).status_code == 401


def test_express_interest_is_idempotent(client, auth_headers, make_filmmaker):
    filmmaker = make_filmmaker(stageName="Asha")
    for _ in range(2):
        r = client.post(INTERESTS, headers=auth_headers, json={"filmmakerId": filmmaker.id})
        assert r.status_code == 200
        assert r.json()["interest"]["status"] == "interested"

    profiles = client.get(INTERESTS, headers=auth_headers).json()["profiles"]
    assert len(profiles) == 1
    assert profiles[0]["filmmaker"]["name"] == "Asha"
    assert profiles[0]["isAvailable"] is True

    r = client.get(INTERESTS, headers=auth_headers, params={"filmmakerId": filmmaker.id})
    assert r.json() == {"isInterested": True}


def test_express_interest_errors(client, auth_headers, make_filmmaker):
    assert client.post(INTERESTS, headers=auth_headers, json={}).status_code == 400
    assert client.post(INTERESTS, headers=auth_headers, json={"filmmakerId": "bogus"}).status_code == 404
    r = client.post(INTERESTS, headers=auth_headers, json={"filmmakerId": str(uuid.uuid4())})
    assert r.status_code == 404
    draft = make_filmmaker(status="draft")
    assert client.post(INTERESTS, headers=auth_headers, json={"filmmakerId": draft.id}).status_code == 404


def test_remove_interest(client, auth_headers, make_filmmaker):
    filmmaker = make_filmmaker()
    client.post(INTERESTS, headers=auth_headers, json={"filmmakerId": filmmaker.id})

    r = client.request("DELETE", INTERESTS, headers=auth_headers, json={"filmmakerId": filmmaker.id})
    assert r.json() == {"success": True, "removed": True}
    r = client.request("DELETE", INTERESTS, headers=auth_headers, json={"filmmakerId": filmmaker.id})
    assert r.json() == {"success": True, "removed": False}
    assert client.get(INTERESTS, headers=auth_headers, params={"filmmakerId": filmmaker.id}).json() == {
        "isInterested": False
    }


def test_remove_interest_via_query_and_missing_id(client, auth_headers, make_filmmaker):
    filmmaker = make_filmmaker()
    client.post(INTERESTS, headers=auth_headers, json={"filmmakerId": filmmaker.id})
    r = client.delete(INTERESTS, headers=auth_headers, params={"filmmakerId": filmmaker.id})
    assert r.json()["removed"] is True
    assert client.delete(INTERESTS, headers=auth_headers).status_code == 400


def test_interests_are_per_user(client, auth_headers, other_user, make_filmmaker):
    from cinegrok.app.core.security import create_access_token

    filmmaker = make_filmmaker()
    client.post(INTERESTS, headers=auth_headers, json={"filmmakerId": filmmaker.id})
    other_headers = {"Authorization": f"Bearer {create_access_token(data={'sub': str(other_user.id)})}"}
    assert client.get(INTERESTS, headers=other_headers).json() == {"profiles": []}


def test_tracker_filters(client, auth_headers, make_filmmaker):
    asha = make_filmmaker(stageName="Asha", primaryRoles=["Director"], currentState="Kerala")
    ravi = make_filmmaker(stageName="Ravi", primaryRoles=["Editor"], currentState="Punjab")
    for filmmaker in (asha, ravi):
        client.post(INTERESTS, headers=auth_headers, json={"filmmakerId": filmmaker.id})
    client.patch(TRACKER, headers=auth_headers, json={"filmmakerId": ravi.id, "status": "shortlisted"})

    data = client.get(TRACKER, headers=auth_headers).json()
    assert data["count"] == 2
    assert data["filters"] == {"status": "all", "role": "", "location": ""}

    data = client.get(TRACKER, headers=auth_headers, params={"status": "shortlisted"}).json()
    assert [i["filmmaker"]["name"] for i in data["interests"]] == ["Ravi"]
    data = client.get(TRACKER, headers=auth_headers, params={"role": "director"}).json()
    assert [i["filmmaker"]["name"] for i in data["interests"]] == ["Asha"]
    data = client.get(TRACKER, headers=auth_headers, params={"location": "punjab"}).json()
    assert [i["filmmaker"]["name"] for i in data["interests"]] == ["Ravi"]

    assert client.get(TRACKER, headers=auth_headers, params={"status": "maybe"}).status_code == 400


def test_tracker_status_and_notes_update_independently(client, auth_headers, make_filmmaker):
    filmmaker = make_filmmaker()
    client.post(INTERESTS, headers=auth_headers, json={"filmmakerId": filmmaker.id})

    r = client.patch(TRACKER, headers=auth_headers, json={"filmmakerId": filmmaker.id, "notes": "Great framing"})
    assert r.json()["interest"]["privateNotes"] == "Great framing"
    assert r.json()["interest"]["status"] == "interested"

    r = client.patch(TRACKER, headers=auth_headers, json={"filmmakerId": filmmaker.id, "status": "contacted"})
    interest = r.json()["interest"]
    assert interest["status"] == "contacted"
    assert interest["privateNotes"] == "Great framing"


def test_tracker_update_errors(client, auth_headers, make_filmmaker):
    filmmaker = make_filmmaker()
    assert client.patch(TRACKER, headers=auth_headers, json={"status": "contacted"}).status_code == 400
    assert client.patch(TRACKER, headers=auth_headers, json={"filmmakerId": filmmaker.id}).status_code == 400
    r = client.patch(TRACKER, headers=auth_headers, json={"filmmakerId": filmmaker.id, "status": "contacted"})
    assert r.status_code == 404
    client.post(INTERESTS, headers=auth_headers, json={"filmmakerId": filmmaker.id})
    r = client.patch(TRACKER, headers=auth_headers, json={"filmmakerId": filmmaker.id, "status": "ghosted"})
    assert r.status_code == 400
