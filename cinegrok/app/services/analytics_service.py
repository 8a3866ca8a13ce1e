"""
Profile analytics - view/click tracking and owner-facing stats.

The calculate_* / parse_* / format_* helpers are pure and used by both the
tracker and the stats endpoint.
"""
import math
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlparse

from sqlalchemy.orm import Session

from cinegrok.app.core.config import CLICK_TYPES
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.filmmaker import Filmmaker
from cinegrok.app.models.interested_profile import InterestedProfile
from cinegrok.app.models.profile_event import ProfileEvent
from cinegrok.app.schemas.profile import ProfileData

logger = get_logger("services.analytics")

REFERRER_CATEGORIES = ("direct", "instagram", "youtube", "twitter", "other")
DEVICE_CATEGORIES = ("mobile", "desktop", "tablet")
MAX_TIPS = 3


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def calculate_ctr(views: int, clicks: int) -> float:
    """Click-through rate as a percentage with one decimal (23.5)."""
    if views == 0:
        return 0.0
    return _round_half_up(clicks / views * 1000) / 10


def calculate_trend_change(current: int, previous: int) -> int:
    """Whole-percent change between two periods; from zero it is 100 (or 0 when still zero)."""
    if previous == 0:
        return 100 if current > 0 else 0
    return _round_half_up((current - previous) / previous * 100)


def parse_referrer(referrer_url: Optional[str]) -> str:
    if not referrer_url:
        return "direct"
    url = referrer_url.strip().lower()
    host = (urlparse(url).netloc or url.split("/")[0]).split(":")[0]
    if host == "instagram.com" or host.endswith(".instagram.com"):
        return "instagram"
    if host in ("youtube.com", "youtu.be") or host.endswith(".youtube.com"):
        return "youtube"
    if host in ("twitter.com", "x.com", "t.co") or host.endswith((".twitter.com", ".x.com")):
        return "twitter"
    # Internal navigation
    if "cinegrok" in host or host in ("localhost", "127.0.0.1"):
        return "direct"
    return "other"


def parse_device(user_agent: Optional[str]) -> str:
    if not user_agent:
        return "desktop"
    ua = user_agent.lower()
    if "ipad" in ua or ("android" in ua and "mobile" not in ua) or "tablet" in ua:
        return "tablet"
    if any(token in ua for token in ("mobile", "android", "iphone", "ipod", "blackberry", "windows phone")):
        return "mobile"
    return "desktop"


# (fields, weight); a group counts once when any of its fields is filled
_COMPLETENESS_WEIGHTS: list[tuple[tuple[str, ...], float]] = [
    (("stageName",), 2),
    (("email",), 2),
    (("country",), 2),
    (("primaryRoles",), 2),
    (("profilePhoto",), 1.5),
    (("filmography",), 1.5),
    (("visualStyle",), 1.5),
    (("creativePhilosophy",), 1.5),
    (("instagram",), 1),
    (("youtube",), 1),
    (("linkedin",), 1),
    (("twitter",), 1),
    (("website",), 1),
    (("nativeCity", "nativeState"), 1),
    (("currentCity", "currentState", "currentLocation"), 1),
    (("languages",), 1),
    (("yearsActive",), 1),
    (("preferredGenres",), 1),
    (("creativeInfluences",), 1),
    (("awards",), 1),
    (("press",), 1),
]


def _filled(profile: ProfileData, *fields: str) -> bool:
    return any(bool(getattr(profile, field)) for field in fields)


def calculate_profile_completeness(profile: Optional[ProfileData]) -> int:
    """Weighted completeness score 0-100."""
    if profile is None:
        return 0
    score = 0.0
    max_score = 0.0
    for fields, weight in _COMPLETENESS_WEIGHTS:
        max_score += weight
        if _filled(profile, *fields):
            score += weight
    return _round_half_up(score / max_score * 100)


def get_improvement_tips(profile: Optional[ProfileData]) -> list[str]:
    """Highest-impact missing pieces first, at most three."""
    if profile is None:
        return ["Complete your profile to get discovered by producers"]
    tips = []
    if not profile.profilePhoto:
        tips.append("Add a profile photo to increase visibility by 40%")
    if not profile.filmography:
        tips.append("Add your filmography to showcase your work")
    if not profile.instagram:
        tips.append("Link your Instagram to boost credibility")
    if not profile.visualStyle:
        tips.append("Describe your visual style to attract matching projects")
    if not profile.creativePhilosophy:
        tips.append("Share your creative philosophy to stand out")
    if not profile.youtube and not profile.letterboxd:
        tips.append("Add video links so producers can see your work")
    has_recognition = profile.awards or profile.screenings or any(f.achievements for f in profile.filmography)
    if not has_recognition:
        tips.append("Add any festival selections or screenings")
    return tips[:MAX_TIPS]


def format_number(num: int) -> str:
    """1200 -> "1.2K", 15000 -> "15K", 2000000 -> "2M"."""
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}".removesuffix(".0") + "M"
    if num >= 1000:
        return f"{num / 1000:.1f}".removesuffix(".0") + "K"
    return str(num)


def format_trend_change(change: int) -> dict:
    if change > 0:
        return {"text": f"+{change}%", "direction": "up"}
    if change < 0:
        return {"text": f"{change}%", "direction": "down"}
    return {"text": "0%", "direction": "neutral"}


class AnalyticsService:
    @staticmethod
    def track_view(db: Session, filmmaker_id: str, referrer: str, device: str) -> None:
        db.add(ProfileEvent(filmmaker_id=filmmaker_id, event_type="view", referrer=referrer, device=device))
        db.query(Filmmaker).filter(Filmmaker.id == filmmaker_id).update(
            {Filmmaker.profile_views: Filmmaker.profile_views + 1}, synchronize_session=False
        )
        db.commit()

    @staticmethod
    def track_click(db: Session, filmmaker_id: str, click_type: str, target_id: str = "") -> None:
        db.add(ProfileEvent(
            filmmaker_id=filmmaker_id,
            event_type="click",
            click_type=click_type,
            target_id=(target_id or "")[:255],
        ))
        db.query(Filmmaker).filter(Filmmaker.id == filmmaker_id).update(
            {Filmmaker.profile_clicks: Filmmaker.profile_clicks + 1}, synchronize_session=False
        )
        db.commit()

    @staticmethod
    def _events_between(db: Session, filmmaker_id: str, start: datetime, end: Optional[datetime] = None):
        query = db.query(ProfileEvent).filter(
            ProfileEvent.filmmaker_id == filmmaker_id, ProfileEvent.created_at >= start
        )
        if end is not None:
            query = query.filter(ProfileEvent.created_at < end)
        return query.all()

    @staticmethod
    def _count(events: list[ProfileEvent], event_type: str) -> int:
        return sum(1 for event in events if event.event_type == event_type)

    @staticmethod
    def get_stats(db: Session, filmmaker: Filmmaker, days: int = 30, now: Optional[datetime] = None) -> dict:
        now = now or datetime.utcnow()
        window = AnalyticsService._events_between(db, filmmaker.id, now - timedelta(days=days))
        last_7 = AnalyticsService._events_between(db, filmmaker.id, now - timedelta(days=7))
        prev_7 = AnalyticsService._events_between(
            db, filmmaker.id, now - timedelta(days=14), now - timedelta(days=7)
        )
        last_30 = AnalyticsService._events_between(db, filmmaker.id, now - timedelta(days=30))
        prev_30 = AnalyticsService._events_between(
            db, filmmaker.id, now - timedelta(days=60), now - timedelta(days=30)
        )
        count = AnalyticsService._count

        total_views = count(window, "view")
        total_clicks = count(window, "click")
        referrers = OrderedDict((key, 0) for key in REFERRER_CATEGORIES)
        devices = OrderedDict((key, 0) for key in DEVICE_CATEGORIES)
        for event in window:
            if event.event_type != "view":
                continue
            if event.referrer in referrers:
                referrers[event.referrer] += 1
            if event.device in devices:
                devices[event.device] += 1

        interests = (
            db.query(InterestedProfile)
            .filter(InterestedProfile.target_profile_id == filmmaker.id)
            .count()
        )
        change_7d = calculate_trend_change(count(last_7, "view"), count(prev_7, "view"))
        change_30d = calculate_trend_change(count(last_30, "view"), count(prev_30, "view"))
        return {
            "totalViews": total_views,
            "totalClicks": total_clicks,
            "ctr": calculate_ctr(total_views, total_clicks),
            "interestsReceived": interests,
            "trend7d": {
                "views": count(last_7, "view"),
                "clicks": count(last_7, "click"),
                "change": change_7d,
            },
            "trend30d": {
                "views": count(last_30, "view"),
                "clicks": count(last_30, "click"),
                "change": change_30d,
            },
            "referrerBreakdown": dict(referrers),
            "deviceBreakdown": dict(devices),
            # Dashboard display strings
            "formatted": {
                "totalViews": format_number(total_views),
                "totalClicks": format_number(total_clicks),
                "interestsReceived": format_number(interests),
                "trend7d": format_trend_change(change_7d),
                "trend30d": format_trend_change(change_30d),
            },
        }

    @staticmethod
    def get_daily_trend(db: Session, filmmaker_id: str, days: int, now: Optional[datetime] = None) -> list[dict]:
        """One row per day in the window, oldest first, zero-filled."""
        now = now or datetime.utcnow()
        start = (now - timedelta(days=days - 1)).date()
        per_day = OrderedDict(
            ((start + timedelta(days=offset)).isoformat(), {"views": 0, "clicks": 0})
            for offset in range(days)
        )
        events = AnalyticsService._events_between(
            db, filmmaker_id, datetime.combine(start, datetime.min.time())
        )
        for event in events:
            bucket = per_day.get(event.created_at.date().isoformat())
            if bucket is None:
                continue
            bucket["views" if event.event_type == "view" else "clicks"] += 1
        return [{"date": day, **counts} for day, counts in per_day.items()]

    @staticmethod
    def get_click_breakdown(db: Session, filmmaker_id: str, days: int = 30, now: Optional[datetime] = None) -> dict:
        """Clicks per click type and target, most clicked first."""
        now = now or datetime.utcnow()
        events = AnalyticsService._events_between(db, filmmaker_id, now - timedelta(days=days))
        counts: dict[str, dict[str, int]] = {click_type: {} for click_type in CLICK_TYPES}
        for event in events:
            if event.event_type != "click" or event.click_type not in counts:
                continue
            target = event.target_id or "unknown"
            counts[event.click_type][target] = counts[event.click_type].get(target, 0) + 1
        return {
            click_type: [
                {"targetId": target, "count": n}
                for target, n in sorted(targets.items(), key=lambda item: item[1], reverse=True)
            ]
            for click_type, targets in counts.items()
        }
