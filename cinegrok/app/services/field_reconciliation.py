"""
Field reconciliation - maps raw profile blobs from either naming convention
(wizard camelCase or legacy snake_case) onto the canonical ProfileData.

Every read of a dual-named field goes through here: the wizard convention is
tried first, legacy keys after. When both are populated and disagree, the
first candidate wins.
"""
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from pydantic import TypeAdapter

from cinegrok.app.core.config import CREW_SCALES, LEGACY_CREW_SCALES, SOCIAL_LINK_KEYS
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.schemas.profile import (
    FilmAchievement,
    FilmographyEntry,
    IntakeRecord,
    LegacyIngestRow,
    ProfileData,
    WizardIntake,
    as_text,
)

logger = get_logger("services.field_reconciliation")

# Canonical text field -> ordered candidate keys (wizard first, legacy after)
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "stageName": ("stageName", "name", "stage_name"),
    "legalName": ("legalName", "legal_name", "full_name"),
    "email": ("email",),
    "phone": ("phone",),
    "pronouns": ("pronouns",),
    "dateOfBirth": ("dateOfBirth", "date_of_birth"),
    "profilePhoto": ("profilePhoto", "profile_photo_url", "profile_photo"),
    "country": ("country",),
    "currentState": ("currentState", "current_state"),
    "currentCity": ("currentCity", "current_city"),
    "currentLocation": ("currentLocation", "current_location"),
    "nativeState": ("nativeState", "native_state"),
    "nativeCity": ("nativeCity", "native_city", "native_location"),
    "nationality": ("nationality",),
    "languages": ("languages",),
    "preferredContact": ("preferredContact", "contact_method", "preferred_contact"),
    "yearsActive": ("yearsActive", "years_active"),
    "visualStyle": ("visualStyle", "style", "visual_style"),
    "creativeInfluences": ("creativeInfluences", "influences", "creative_influences"),
    "creativePhilosophy": ("creativePhilosophy", "philosophy", "creative_philosophy"),
    "beliefAboutCinema": ("beliefAboutCinema", "belief_about_cinema"),
    "messageOrIntent": ("messageOrIntent", "message_or_intent"),
    "creativeSignature": ("creativeSignature", "creative_signature"),
    "availability": ("availability",),
    "preferredWorkLocation": ("preferredWorkLocation", "preferred_work_location"),
    "awards": ("awards",),
    "screenings": ("screenings",),
    "press": ("press",),
    "educationTraining": ("educationTraining", "education_training", "education"),
    "schooling": ("schooling",),
    "higherSecondary": ("higherSecondary", "higher_secondary"),
    "undergraduate": ("undergraduate",),
    "postgraduate": ("postgraduate",),
    "phd": ("phd",),
    "certifications": ("certifications",),
    "aiBio": ("aiBio", "generated_bio", "bio"),
}

# Canonical list field -> ordered candidate keys
LIST_ALIASES: dict[str, tuple[str, ...]] = {
    "primaryRoles": ("primaryRoles", "roles", "primary_roles"),
    "secondaryRoles": ("secondaryRoles", "secondary_roles"),
    "preferredGenres": ("preferredGenres", "genres", "preferred_genres"),
}

COLLAB_ALIASES: tuple[str, ...] = ("openToCollaborations", "open_to_collab")
FILM_LIST_ALIASES: tuple[str, ...] = ("filmography", "films")
SOCIAL_LINKS_KEY = "social_links"
# Envelope / lifecycle keys that are not profile fields
_META_KEYS = {"source", "id", "profile_url", "isComplete", "is_complete", "lastUpdated", "status"}

FILM_ALIASES: dict[str, tuple[str, ...]] = {
    "title": ("title", "name"),
    "year": ("year", "release_year"),
    "format": ("format", "project_format"),
    "status": ("status", "production_status"),
    "primaryRole": ("primaryRole", "primary_role", "role"),
    "synopsis": ("synopsis", "description"),
    "logline": ("logline",),
    "durationValue": ("durationValue", "duration_value"),
    "durationUnit": ("durationUnit", "duration_unit"),
    "duration": ("duration", "runtime"),
    "posterUrl": ("posterUrl", "poster", "poster_url"),
    "watchLink": ("watchLink", "link", "watch_link"),
    "trailerUrl": ("trailerUrl", "trailer", "trailer_url"),
    "press": ("press",),
}
FILM_LIST_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "genres": ("genres", "genre"),
    "additionalRoles": ("additionalRoles", "additional_roles"),
}


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, dict, set)):
        return bool(value)
    return True


def resolve(record: Any, *keys: str, default: Any = None) -> Any:
    """
    First-match-wins lookup across candidate keys.
    None, blank strings and empty containers count as absent. Never raises.
    """
    if not isinstance(record, Mapping):
        return default
    for key in keys:
        value = record.get(key)
        if _is_present(value):
            return value
    return default


def resolve_text(record: Any, *keys: str) -> str:
    return as_text(resolve(record, *keys, default=""))


def resolve_list(record: Any, *keys: str) -> list[str]:
    """
    Like resolve() but always returns a list of non-blank strings.
    A legacy comma-separated (or single) string becomes a list.
    """
    value = resolve(record, *keys)
    if isinstance(value, (list, tuple)):
        return [as_text(item) for item in value if as_text(item)]
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return []


# Display resolvers accept a raw blob or an already normalized ProfileData
def resolve_display_name(record: Any) -> str:
    return normalize_profile(record).stageName


def resolve_display_location(record: Any) -> str:
    """current_location, else "city, state, country" (non-empty parts), else the placeholder."""
    return normalize_profile(record).display_location


def resolve_roles(record: Any) -> list[str]:
    return normalize_profile(record).primaryRoles


def normalize_crew_scale(value: Any) -> str:
    """Map legacy buckets (2-5, 6-15, 15+ ...) onto the canonical ordinal labels."""
    text = as_text(value)
    if not text or text in CREW_SCALES:
        return text
    for label in CREW_SCALES:
        if label.lower() == text.lower():
            return label
    mapped = LEGACY_CREW_SCALES.get(text.lower().replace(" ", ""))
    if mapped:
        return mapped
    logger.debug("Unrecognised crew scale value=%r", text)
    return text


def normalize_collaboration(value: Any) -> str:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    text = as_text(value)
    lowered = text.lower()
    if lowered in ("true", "yes"):
        return "Yes"
    if lowered in ("false", "no"):
        return "No"
    if lowered == "selective":
        return "Selective"
    return text


def _resolve_collaboration(record: Mapping) -> str:
    # A legacy `open_to_collab: false` is a real value, so booleans bypass _is_present
    for key in COLLAB_ALIASES:
        value = record.get(key)
        if isinstance(value, bool) or _is_present(value):
            return normalize_collaboration(value)
    return ""


def _resolve_social(record: Mapping) -> dict[str, str]:
    nested = record.get(SOCIAL_LINKS_KEY)
    nested = nested if isinstance(nested, Mapping) else {}
    return {
        key: as_text(resolve(record, key, default="")) or as_text(nested.get(key))
        for key in SOCIAL_LINK_KEYS
    }


def normalize_achievements(raw: Any) -> list[FilmAchievement]:
    if not isinstance(raw, list):
        return []
    achievements = []
    for item in raw:
        if not isinstance(item, Mapping):
            logger.debug("Skipping achievement with unexpected shape type=%s", type(item).__name__)
            continue
        achievements.append(FilmAchievement.model_validate(dict(item)))
    return achievements


def normalize_film(raw: Any) -> Optional[FilmographyEntry]:
    """Canonical FilmographyEntry from a wizard or legacy film dict; None for non-dicts."""
    if not isinstance(raw, Mapping):
        logger.debug("Skipping film with unexpected shape type=%s", type(raw).__name__)
        return None
    fields: dict[str, Any] = {
        field: resolve_text(raw, *keys) for field, keys in FILM_ALIASES.items()
    }
    for field, keys in FILM_LIST_FIELD_ALIASES.items():
        fields[field] = resolve_list(raw, *keys)
    fields["crewScale"] = normalize_crew_scale(resolve(raw, "crewScale", "crew_scale"))
    fields["achievements"] = normalize_achievements(raw.get("achievements"))
    film_id = resolve_text(raw, "id")
    if film_id:
        fields["id"] = film_id
    return FilmographyEntry(**fields)


def _known_keys() -> set[str]:
    keys = set(_META_KEYS) | set(COLLAB_ALIASES) | set(FILM_LIST_ALIASES)
    keys |= set(SOCIAL_LINK_KEYS) | {SOCIAL_LINKS_KEY}
    for aliases in list(FIELD_ALIASES.values()) + list(LIST_ALIASES.values()):
        keys.update(aliases)
    return keys


_KNOWN_KEYS = _known_keys()


def normalize_profile(raw: Any) -> ProfileData:
    """
    The single normalization function: any raw profile blob -> ProfileData.
    Unknown keys are logged and dropped.
    """
    if isinstance(raw, ProfileData):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Profile blob has unexpected shape type=%s", type(raw).__name__)
        return ProfileData()

    unknown = sorted(key for key in raw if key not in _KNOWN_KEYS)
    if unknown:
        logger.debug("Ignoring unknown profile keys=%s", unknown)

    fields: dict[str, Any] = {
        field: resolve_text(raw, *keys) for field, keys in FIELD_ALIASES.items()
    }
    for field, keys in LIST_ALIASES.items():
        fields[field] = resolve_list(raw, *keys)
    fields["openToCollaborations"] = _resolve_collaboration(raw)
    fields.update(_resolve_social(raw))

    films_raw = resolve(raw, *FILM_LIST_ALIASES, default=[])
    films = [normalize_film(item) for item in films_raw] if isinstance(films_raw, list) else []
    fields["filmography"] = [film for film in films if film is not None]

    fields["isComplete"] = bool(resolve(raw, "isComplete", "is_complete", default=False))
    fields["lastUpdated"] = _parse_timestamp(resolve(raw, "lastUpdated"))
    return ProfileData(**fields)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable lastUpdated value=%r", value)
    return None


def from_wizard(intake: WizardIntake) -> ProfileData:
    return normalize_profile(intake.data)


def from_legacy(row: LegacyIngestRow) -> ProfileData:
    data = row.raw_form_data()
    data["name"] = row.name
    return normalize_profile(data)


_INTAKE_ADAPTER: TypeAdapter[WizardIntake | LegacyIngestRow] = TypeAdapter(IntakeRecord)


def parse_intake(data: Mapping[str, Any]) -> WizardIntake | LegacyIngestRow:
    """Tagged intake from a dict carrying `source` ("wizard" or "legacy")."""
    return _INTAKE_ADAPTER.validate_python(dict(data))


def normalize_intake(record: WizardIntake | LegacyIngestRow) -> ProfileData:
    """The one entry point from either intake path to ProfileData."""
    if isinstance(record, LegacyIngestRow):
        return from_legacy(record)
    return from_wizard(record)


def flatten_for_search(profile: ProfileData) -> dict[str, Any]:
    """Flattened filmmakers columns used by the browse query layer."""
    genres: list[str] = []
    for genre in profile.preferredGenres + [g for film in profile.filmography for g in film.genres]:
        if genre not in genres:
            genres.append(genre)
    return {
        "name": profile.stageName,
        "current_city": profile.currentCity or profile.currentLocation or None,
        "current_state": profile.currentState or None,
        "roles_text": ", ".join(profile.primaryRoles + profile.secondaryRoles) or None,
        "genres_text": ", ".join(genres) or None,
        "open_to_collab": profile.openToCollaborations == "Yes",
    }
