"""
Profile rendering - audience (public) and producer (evaluation) views of one profile.

Both views are built from the canonical ProfileData only. Outbound links in the
audience view go through the click tracker.
"""
from typing import Literal, Optional
from urllib.parse import urlencode

from pydantic import BaseModel

from cinegrok.app.core.config import (
    DEFAULT_ROLE_COLOR,
    EDUCATION_KEYS,
    ROLE_COLORS,
    SOCIAL_LINK_KEYS,
    settings,
)
from cinegrok.app.schemas.profile import ProfileData
from cinegrok.app.services.statistics import (
    aggregate,
    aggregate_achievements,
    chart_series,
    sort_films_by_year,
)

ViewMode = Literal["audience", "producer"]
GatePolicy = Literal["prompt", "noop"]

TRACK_OUT_PATH = "/api/v1/analytics/out"
LOGIN_PROMPT_MESSAGE = "Log in to see the producer view with contact details and project breakdowns."


class ViewDecision(BaseModel):
    mode: ViewMode
    login_prompt: bool = False
    message: Optional[str] = None


def resolve_view_mode(
    requested: Optional[str], is_logged_in: bool, policy: Optional[str] = None
) -> ViewDecision:
    """
    Producer mode needs a logged-in viewer. Otherwise the page stays in audience
    mode; the "prompt" policy adds an inline login prompt, "noop" does not.
    """
    if requested != "producer":
        return ViewDecision(mode="audience")
    if is_logged_in:
        return ViewDecision(mode="producer")
    if (policy or settings.producer_gate_policy) == "noop":
        return ViewDecision(mode="audience")
    return ViewDecision(mode="audience", login_prompt=True, message=LOGIN_PROMPT_MESSAGE)


def theme_for_roles(primary_roles: list[str]) -> str:
    """Accent colour for the first primary role. Derived on every render."""
    if not primary_roles:
        return DEFAULT_ROLE_COLOR
    return ROLE_COLORS.get(primary_roles[0], DEFAULT_ROLE_COLOR)


def profile_path(filmmaker_id: str, **params: str) -> str:
    query = urlencode({k: v for k, v in params.items() if v})
    return f"/filmmakers/{filmmaker_id}" + (f"?{query}" if query else "")


def tracked_link(filmmaker_id: str, click_type: str, target_id: str, url: str) -> str:
    query = urlencode({
        "filmmaker_id": filmmaker_id,
        "click_type": click_type,
        "target_id": target_id,
        "url": url,
    })
    return f"{TRACK_OUT_PATH}?{query}"


def social_links(profile: ProfileData) -> list[dict]:
    return [
        {"platform": key, "url": getattr(profile, key)}
        for key in SOCIAL_LINK_KEYS
        if getattr(profile, key)
    ]


def outbound_urls(profile: ProfileData, filmmaker_id: str) -> set[str]:
    """Every URL the tracked redirect may send a visitor to for this profile."""
    urls = {link["url"] for link in social_links(profile)}
    for film in profile.filmography:
        urls.update(url for url in (film.watchLink, film.trailerUrl) if url)
        urls.add(profile_path(filmmaker_id, film=film.id))
    return urls


def build_audience_view(profile: ProfileData, filmmaker_id: str, open_film_id: Optional[str] = None) -> dict:
    """Hero, about, filmography gallery (+ detail drawer), social links and sidebar."""
    gallery = []
    drawer = None
    for film in profile.filmography:
        item = {
            "id": film.id,
            "title": film.title,
            "year": film.year,
            "format": film.format,
            "primaryRole": film.primaryRole,
            "posterUrl": film.posterUrl,
            "info_href": tracked_link(
                filmmaker_id, "film", film.id, profile_path(filmmaker_id, film=film.id)
            ),
            "watch_href": tracked_link(filmmaker_id, "watch", film.id, film.watchLink) if film.watchLink else None,
            "trailer_href": tracked_link(filmmaker_id, "trailer", film.id, film.trailerUrl) if film.trailerUrl else None,
        }
        gallery.append(item)
        if film.id == open_film_id:
            drawer = {
                **item,
                "synopsis": film.synopsis,
                "logline": film.logline,
                "duration": film.duration_label,
                "genres": film.genres,
                "status": film.status,
                "additionalRoles": film.additionalRoles,
                "achievements": [
                    {
                        "type": a.type,
                        "result": a.result,
                        "eventName": a.eventName,
                        "year": a.year,
                        "category": a.display_category,
                    }
                    for a in film.achievements
                ],
            }

    return {
        "mode": "audience",
        "theme_color": theme_for_roles(profile.primaryRoles),
        "hero": {
            "name": profile.stageName,
            "photo": profile.profilePhoto,
            "primaryRoles": profile.primaryRoles,
            "secondaryRoles": profile.secondaryRoles,
            "location": profile.display_location,
            "yearsActive": profile.yearsActive,
        },
        "about": {
            "bio": profile.aiBio,
            "creativePhilosophy": profile.creativePhilosophy,
            "beliefAboutCinema": profile.beliefAboutCinema,
            "messageOrIntent": profile.messageOrIntent,
            "creativeSignature": profile.creativeSignature,
        },
        "gallery": gallery,
        "drawer": drawer,
        "social": [
            {**link, "href": tracked_link(filmmaker_id, "social", link["platform"], link["url"])}
            for link in social_links(profile)
        ],
        "sidebar": {
            "genres": profile.preferredGenres,
            "visualStyle": profile.visualStyle,
            "creativeInfluences": profile.creativeInfluences,
            "availability": profile.availability,
            "openToCollaborations": profile.openToCollaborations,
            "preferredWorkLocation": profile.preferredWorkLocation,
            "languages": profile.languages,
        },
    }


def build_producer_view(profile: ProfileData, filmmaker_id: str) -> dict:
    """Contact block, category charts, tag clouds, activity table and recognition summary."""
    stats = aggregate(profile.filmography)
    achievements = aggregate_achievements(profile.filmography)

    role_cloud = list(dict.fromkeys(profile.primaryRoles + profile.secondaryRoles + list(stats.by_role)))
    genre_cloud = list(dict.fromkeys(profile.preferredGenres + list(stats.by_genre)))

    return {
        "mode": "producer",
        "filmmaker_id": filmmaker_id,
        "theme_color": theme_for_roles(profile.primaryRoles),
        "header": {
            "name": profile.stageName,
            "photo": profile.profilePhoto,
            "primaryRoles": profile.primaryRoles,
            "location": profile.display_location,
            "availability": profile.availability,
            "openToCollaborations": profile.openToCollaborations,
        },
        "contact": {
            "email": profile.email,
            "phone": profile.phone,
            "preferredContact": profile.preferredContact,
            "languages": profile.languages,
            "preferredWorkLocation": profile.preferredWorkLocation,
        },
        "charts": {
            "status": chart_series(stats.by_status),
            "format": chart_series(stats.by_format),
            "crew_scale": chart_series(stats.by_crew_scale),
        },
        "role_cloud": role_cloud,
        "role_counts": stats.by_role,
        "genre_cloud": genre_cloud,
        "genre_counts": stats.by_genre,
        "total_films": stats.total_films,
        "activity": [
            {
                "year": film.year,
                "title": film.title,
                "format": film.format,
                "status": film.status,
                "primaryRole": film.primaryRole,
                "crewScale": film.crewScale,
            }
            for film in sort_films_by_year(profile.filmography)
        ],
        "recognition": {
            "wins": achievements.wins,
            "nominations": achievements.nominations,
            "selections": achievements.selections,
            "screenings": achievements.screenings,
            "items": [
                {
                    "filmTitle": entry.filmTitle,
                    "filmYear": entry.filmYear,
                    "eventName": entry.achievement.eventName,
                    "year": entry.achievement.year,
                    "type": entry.achievement.type,
                    "result": entry.achievement.result,
                    "category": entry.achievement.display_category,
                }
                for entry in achievements.flat_list
            ],
            "awards_text": profile.awards,
            "screenings_text": profile.screenings,
            "press": profile.press,
        },
        "education": {
            key: getattr(profile, key)
            for key in ["educationTraining", *EDUCATION_KEYS]
            if getattr(profile, key)
        },
        "social": social_links(profile),
    }
