"""Tests for analytics tracking, tracked redirects, owner stats and the pure helpers"""
import uuid
from datetime import datetime, timedelta
from unittest.mock import patch

from cinegrok.app.api.v1.analytics import limiter
from cinegrok.app.models.filmmaker import Filmmaker
from cinegrok.app.models.profile_event import ProfileEvent
from cinegrok.app.schemas.profile import FilmographyEntry, ProfileData
from cinegrok.app.services.analytics_service import (
    AnalyticsService,
    calculate_ctr,
    calculate_profile_completeness,
    calculate_trend_change,
    format_number,
    format_trend_change,
    get_improvement_tips,
    parse_device,
    parse_referrer,
)

TRACK = "/api/v1/analytics/track"
OUT = "/api/v1/analytics/out"
STATS = "/api/v1/analytics/stats"
IPHONE = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) Mobile/15E148"


def test_calculate_ctr():
    assert calculate_ctr(0, 5) == 0.0
    assert calculate_ctr(200, 47) == 23.5
    assert calculate_ctr(3, 1) == 33.3


def test_calculate_trend_change():
    assert calculate_trend_change(10, 0) == 100
    assert calculate_trend_change(0, 0) == 0
    assert calculate_trend_change(15, 10) == 50
    assert calculate_trend_change(5, 10) == -50


def test_parse_referrer():
    assert parse_referrer(None) == "direct"
    assert parse_referrer("https://l.instagram.com/?u=x") == "instagram"
    assert parse_referrer("https://www.youtube.com/watch?v=1") == "youtube"
    assert parse_referrer("https://t.co/abc") == "twitter"
    assert parse_referrer("https://cinegrok.app/browse") == "direct"
    assert parse_referrer("https://notinstagram.example.com") == "other"


def test_parse_device():
    assert parse_device(IPHONE) == "mobile"
    assert parse_device("Mozilla/5.0 (iPad; CPU OS 17_0)") == "tablet"
    assert parse_device("Mozilla/5.0 (Linux; Android 14; Pixel Tablet)") == "tablet"
    assert parse_device("Mozilla/5.0 (Windows NT 10.0; Win64; x64)") == "desktop"
    assert parse_device(None) == "desktop"


def test_format_helpers():
    assert format_number(950) == "950"
    assert format_number(1200) == "1.2K"
    assert format_number(15000) == "15K"
    assert format_number(2_000_000) == "2M"
    assert format_trend_change(12) == {"text": "+12%", "direction": "up"}
    assert format_trend_change(-3) == {"text": "-3%", "direction": "down"}
    assert format_trend_change(0)["direction"] == "neutral"


def test_completeness_and_tips():
    assert calculate_profile_completeness(None) == 0
    assert calculate_profile_completeness(ProfileData()) == 0
    profile = ProfileData(stageName="Asha", email="a@x.com", country="India", primaryRoles=["Director"])
    assert 0 < calculate_profile_completeness(profile) < 100

    tips = get_improvement_tips(profile)
    assert len(tips) == 3
    assert tips[0] == "Add a profile photo to increase visibility by 40%"
    full = profile.model_copy(update={
        "profilePhoto": "p.jpg",
        "filmography": [FilmographyEntry(title="One")],
        "instagram": "i",
        "visualStyle": "v",
        "creativePhilosophy": "c",
        "youtube": "y",
        "awards": "a",
    })
    assert get_improvement_tips(full) == []


def test_track_view_and_click(client, make_filmmaker, db_session):
    filmmaker = make_filmmaker()
    r = client.post(
        TRACK,
        json={"type": "view", "filmmakerId": filmmaker.id},
        headers={"User-Agent": IPHONE, "Referer": "https://www.instagram.com/asha"},
    )
    assert r.json() == {"tracked": True}
    r = client.post(TRACK, json={"type": "click", "filmmakerId": filmmaker.id, "clickType": "social", "targetId": "instagram"})
    assert r.json() == {"tracked": True}

    events = db_session.query(ProfileEvent).order_by(ProfileEvent.id).all()
    assert [(e.event_type, e.referrer, e.device) for e in events][0] == ("view", "instagram", "mobile")
    assert (events[1].click_type, events[1].target_id) == ("social", "instagram")
    db_session.refresh(filmmaker)
    assert (filmmaker.profile_views, filmmaker.profile_clicks) == (1, 1)


def test_track_filters_bots(client, make_filmmaker, db_session):
    filmmaker = make_filmmaker()
    r = client.post(
        TRACK,
        json={"type": "view", "filmmakerId": filmmaker.id},
        headers={"User-Agent": "Mozilla/5.0 (compatible; Googlebot/2.1)"},
    )
    assert r.status_code == 200
    assert r.json() == {"tracked": False, "reason": "bot"}
    assert db_session.query(ProfileEvent).count() == 0


def test_track_validation(client, make_filmmaker):
    filmmaker = make_filmmaker()
    r = client.post(TRACK, json={"type": "view"})
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required fields: type, filmmakerId", "tracked": False}
    assert client.post(TRACK, json={"type": "share", "filmmakerId": filmmaker.id}).status_code == 400
    assert client.post(TRACK, json={"type": "click", "filmmakerId": filmmaker.id}).status_code == 400
    r = client.post(TRACK, json={"type": "click", "filmmakerId": filmmaker.id, "clickType": "poster"})
    assert r.status_code == 400
    r = client.post(TRACK, json={"type": "view", "filmmakerId": str(uuid.uuid4())})
    assert r.status_code == 404
    assert r.json()["tracked"] is False


def test_track_rate_limited(client, make_filmmaker):
    filmmaker = make_filmmaker()
    with patch.object(limiter, "limit", 2):
        for _ in range(2):
            assert client.post(TRACK, json={"type": "view", "filmmakerId": filmmaker.id}).status_code == 200
        r = client.post(TRACK, json={"type": "view", "filmmakerId": filmmaker.id})
    assert r.status_code == 429
    assert r.json() == {"error": "Rate limited", "tracked": False}


def test_tracked_redirect_records_click(client, make_filmmaker, db_session):
    filmmaker = make_filmmaker(instagram="https://instagram.com/asha")
    r = client.get(
        OUT,
        params={
            "filmmaker_id": filmmaker.id,
            "click_type": "social",
            "target_id": "instagram",
            "url": "https://instagram.com/asha",
        },
        follow_redirects=False,
    )
    assert r.status_code == 302
    assert r.headers["location"] == "https://instagram.com/asha"
    event = db_session.query(ProfileEvent).one()
    assert (event.event_type, event.click_type, event.target_id) == ("click", "social", "instagram")


def test_tracked_redirect_film_info_path(client, make_filmmaker):
    filmmaker = make_filmmaker(filmography=[{"id": "film1", "title": "Monsoon"}])
    r = client.get(
        OUT,
        params={
            "filmmaker_id": filmmaker.id,
            "click_type": "film",
            "target_id": "film1",
            "url": f"/filmmakers/{filmmaker.id}?film=film1",
        },
        follow_redirects=False,
    )
    assert r.status_code == 302


def test_tracked_redirect_rejects_foreign_urls(client, make_filmmaker):
    filmmaker = make_filmmaker(instagram="https://instagram.com/asha")
    params = {"filmmaker_id": filmmaker.id, "click_type": "social", "url": "https://evil.example.com"}
    assert client.get(OUT, params=params, follow_redirects=False).status_code == 400
    params.update(click_type="poster", url="https://instagram.com/asha")
    assert client.get(OUT, params=params, follow_redirects=False).status_code == 400
    params.update(click_type="social", filmmaker_id=str(uuid.uuid4()))
    assert client.get(OUT, params=params, follow_redirects=False).status_code == 404


def test_stats_requires_own_profile(client, auth_headers):
    assert client.get(STATS).status_code == 401
    r = client.get(STATS, headers=auth_headers)
    assert r.status_code == 404
    assert r.json()["detail"] == "No filmmaker profile found"


def test_stats(client, auth_headers, test_user, make_filmmaker, db_session):
    filmmaker = make_filmmaker(
        user_id=test_user.id,
        stageName="Asha",
        email="a@x.com",
        country="India",
        primaryRoles=["Director"],
        filmography=[{"title": "Monsoon", "primaryRole": "Director", "achievements": [{"type": "award"}]}],
    )
    now = datetime.utcnow()
    for _ in range(4):
        AnalyticsService.track_view(db_session, filmmaker.id, "direct", "desktop")
    AnalyticsService.track_click(db_session, filmmaker.id, "watch", "f1")
    db_session.add(ProfileEvent(
        filmmaker_id=filmmaker.id, event_type="view", referrer="youtube", device="mobile",
        created_at=now - timedelta(days=10),
    ))
    db_session.commit()

    r = client.get(STATS, headers=auth_headers, params={"trend": "true", "clicks": "true", "days": 7})
    assert r.status_code == 200
    data = r.json()
    assert data["totalViews"] == 4
    assert data["totalClicks"] == 1
    assert data["ctr"] == 25.0
    assert data["trend7d"] == {"views": 4, "clicks": 1, "change": 300}
    assert data["trend30d"]["views"] == 5
    assert data["trend30d"]["change"] == 100
    assert data["referrerBreakdown"]["direct"] == 4
    assert data["deviceBreakdown"]["desktop"] == 4
    assert len(data["dailyTrend"]) == 7
    assert data["dailyTrend"][-1]["views"] == 4
    assert data["clickBreakdown"]["watch"] == [{"targetId": "f1", "count": 1}]
    assert data["filmography"]["total_films"] == 1
    assert data["achievements"]["wins"] == 1
    assert "flat_list" not in data["achievements"]
    assert 0 < data["profileCompleteness"] < 100
    assert data["formatted"] == {
        "totalViews": "4",
        "totalClicks": "1",
        "interestsReceived": "0",
        "trend7d": {"text": "+300%", "direction": "up"},
        "trend30d": {"text": "+100%", "direction": "up"},
    }


def test_stats_days_bounds(client, auth_headers, test_user, make_filmmaker):
    make_filmmaker(user_id=test_user.id)
    assert client.get(STATS, headers=auth_headers, params={"days": 0}).status_code == 422
    assert client.get(STATS, headers=auth_headers, params={"days": 366}).status_code == 422
