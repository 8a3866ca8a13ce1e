"""Tests for the server-rendered browse page and the dual-mode profile page"""
import uuid
from unittest.mock import patch

from cinegrok.app.core.config import settings
from cinegrok.app.models.profile_event import ProfileEvent
from cinegrok.app.services.profile_renderer import (
    LOGIN_PROMPT_MESSAGE,
    build_producer_view,
    outbound_urls,
    resolve_view_mode,
    theme_for_roles,
)
from cinegrok.app.services.field_reconciliation import normalize_profile


def test_producer_toggle_while_logged_out_noop_policy():
    decision = resolve_view_mode("producer", is_logged_in=False, policy="noop")
    assert decision.mode == "audience"
    assert decision.login_prompt is False
    assert decision.message is None


def test_producer_toggle_while_logged_out_prompt_policy():
    decision = resolve_view_mode("producer", is_logged_in=False, policy="prompt")
    assert decision.mode == "audience"
    assert decision.login_prompt is True
    assert decision.message == LOGIN_PROMPT_MESSAGE


def test_view_mode_when_logged_in():
    assert resolve_view_mode("producer", is_logged_in=True).mode == "producer"
    assert resolve_view_mode(None, is_logged_in=True).mode == "audience"
    assert resolve_view_mode("anything", is_logged_in=False).login_prompt is False


def test_theme_follows_first_primary_role():
    assert theme_for_roles(["Director", "Editor"]) == theme_for_roles(["Director"])
    assert theme_for_roles([]) == "#52525b"
    assert theme_for_roles(["Puppeteer"]) == "#52525b"


def test_producer_view_aggregates():
    profile = normalize_profile({
        "stageName": "Asha",
        "email": "asha@example.com",
        "primaryRoles": ["Director"],
        "filmography": [
            {"title": "Old", "year": "2018", "status": "Released", "primaryRole": "Director"},
            {"title": "New", "year": "2023", "status": "In Production", "primaryRole": "Writer",
             "additionalRoles": ["Director"], "achievements": [{"type": "nomination", "year": "2024"}]},
        ],
    })
    view = build_producer_view(profile, "fm-1")
    assert view["contact"]["email"] == "asha@example.com"
    assert [row["title"] for row in view["activity"]] == ["New", "Old"]
    assert view["role_counts"] == {"Director": 2, "Writer": 1}
    assert view["charts"]["status"] == [{"name": "Released", "value": 1}, {"name": "In Production", "value": 1}]
    assert view["recognition"]["nominations"] == 1


def test_outbound_urls():
    profile = normalize_profile({
        "instagram": "https://instagram.com/asha",
        "filmography": [{"id": "f1", "watchLink": "https://vimeo.com/1"}],
    })
    assert outbound_urls(profile, "fm-1") == {
        "https://instagram.com/asha",
        "https://vimeo.com/1",
        "/filmmakers/fm-1?film=f1",
    }


def test_browse_page_pagination(client, make_filmmaker):
    for _ in range(25):
        make_filmmaker(primaryRoles=["Director"])
    r = client.get("/browse", params={"role": "director", "page": 2})
    assert r.status_code == 200
    assert "25 filmmakers" in r.text
    assert "Page 2 of 3" in r.text
    assert 'href="/browse?role=director&amp;page=1">Previous' in r.text
    assert 'href="/browse?role=director&amp;page=3">Next' in r.text
    assert "Filmmaker 13" in r.text
    assert "Filmmaker 14" not in r.text


def test_browse_page_empty_state(client):
    r = client.get("/browse", params={"role": "gaffer"})
    assert r.status_code == 200
    assert "No filmmakers found" in r.text
    assert '<span aria-disabled="true">Previous</span>' in r.text
    assert '<span aria-disabled="true">Next</span>' in r.text
    assert "Browsing as guest" in r.text


def test_profile_page_audience(client, make_filmmaker, db_session):
    filmmaker = make_filmmaker(
        stageName="Asha Rao",
        email="asha@example.com",
        primaryRoles=["Director"],
        filmography=[{"id": "f1", "title": "Monsoon", "synopsis": "Rain comes.", "watchLink": "https://vimeo.com/1"}],
    )
    r = client.get(f"/filmmakers/{filmmaker.id}")
    assert r.status_code == 200
    assert "Asha Rao" in r.text
    assert "Monsoon" in r.text
    assert "/api/v1/analytics/out?" in r.text
    assert "asha@example.com" not in r.text
    assert "Rain comes." not in r.text
    assert db_session.query(ProfileEvent).filter(ProfileEvent.event_type == "view").count() == 1

    r = client.get(f"/filmmakers/{filmmaker.id}", params={"film": "f1"})
    assert "Rain comes." in r.text


def test_profile_page_producer_gate_prompt(client, make_filmmaker):
    filmmaker = make_filmmaker(email="asha@example.com")
    with patch.object(settings, "producer_gate_policy", "prompt"):
        r = client.get(f"/filmmakers/{filmmaker.id}", params={"view": "producer"})
    assert r.status_code == 200
    assert LOGIN_PROMPT_MESSAGE in r.text
    assert "asha@example.com" not in r.text


def test_profile_page_producer_gate_noop(client, make_filmmaker):
    filmmaker = make_filmmaker(email="asha@example.com")
    with patch.object(settings, "producer_gate_policy", "noop"):
        r = client.get(f"/filmmakers/{filmmaker.id}", params={"view": "producer"})
    assert r.status_code == 200
    assert LOGIN_PROMPT_MESSAGE not in r.text
    assert "asha@example.com" not in r.text


def test_profile_page_producer_view_logged_in(client, auth_headers, make_filmmaker):
    filmmaker = make_filmmaker(email="asha@example.com")
    client.post("/api/interested-profiles", headers=auth_headers, json={"filmmakerId": filmmaker.id})
    r = client.get(f"/filmmakers/{filmmaker.id}", params={"view": "producer"}, headers=auth_headers)
    assert r.status_code == 200
    assert "asha@example.com" in r.text
    assert "Interested" in r.text
    assert "Test User" in r.text


def test_profile_page_not_found(client, make_filmmaker):
    assert client.get(f"/filmmakers/{uuid.uuid4()}").status_code == 404
    assert client.get("/filmmakers/not-a-uuid").status_code == 404
    draft = make_filmmaker(status="draft")
    r = client.get(f"/filmmakers/{draft.id}")
    assert r.status_code == 404
    assert "Profile not found" in r.text


def test_profile_page_skips_bot_views(client, make_filmmaker, db_session):
    filmmaker = make_filmmaker()
    client.get(f"/filmmakers/{filmmaker.id}", headers={"User-Agent": "Twitterbot/1.0"})
    assert db_session.query(ProfileEvent).count() == 0
