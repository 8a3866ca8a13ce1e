"""
Profile Pydantic schemas - canonical ProfileData plus the two intake shapes
(wizard drafts and legacy bulk-ingestion rows) that feed it.
"""
import uuid
from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator
from typing_extensions import Annotated

from cinegrok.app.core.config import ACHIEVEMENT_RESULTS, EVENT_CATEGORIES, LOCATION_PLACEHOLDER
from cinegrok.app.core.logging_config import get_logger

logger = get_logger("schemas.profile")

AchievementType = Literal["award", "nomination", "official_selection", "screening"]
AchievementResult = Literal["won", "nominated", "selected", "screened"]
EventCategory = Literal["festival", "competition", "ceremony", "other"]


def new_local_id() -> str:
    """Opaque id for films/achievements created on the client side of the wizard."""
    return uuid.uuid4().hex[:12]


def as_text(value: Any) -> str:
    """None -> "", numbers -> str, strings stripped."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


# --- Nested schemas ---
class FilmAchievement(BaseModel):
    """
    One award / nomination / selection / screening tied to a film.
    `result` is always derived from `type`; a conflicting result is replaced.
    """
    id: str = Field(default_factory=new_local_id)
    type: AchievementType = "award"
    eventCategory: EventCategory = "festival"
    eventName: str = ""
    year: str = ""
    category: str = ""
    customCategory: str = ""
    result: AchievementResult = "won"
    notes: str = ""

    model_config = {"extra": "ignore"}

    @model_validator(mode="before")
    @classmethod
    def _derive_result(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        ach_type = data.get("type")
        if ach_type not in ACHIEVEMENT_RESULTS:
            if ach_type:
                logger.debug("Unknown achievement type=%r, using award", ach_type)
            ach_type = "award"
        expected = ACHIEVEMENT_RESULTS[ach_type]
        supplied = data.get("result")
        if supplied and supplied != expected:
            logger.debug(
                "Achievement result replaced type=%s supplied=%s result=%s",
                ach_type, supplied, expected,
            )
        data["type"] = ach_type
        data["result"] = expected
        category = data.get("eventCategory")
        if category not in EVENT_CATEGORIES:
            data["eventCategory"] = "other" if category else "festival"
        for key in ("id", "eventName", "year", "category", "customCategory", "notes"):
            if key in data:
                data[key] = as_text(data[key])
        if not data.get("id"):
            data.pop("id", None)
        return data

    @property
    def display_category(self) -> str:
        if self.category == "Custom":
            return self.customCategory
        return self.category


class FilmographyEntry(BaseModel):
    id: str = Field(default_factory=new_local_id)
    title: str = ""
    year: str = ""
    genres: List[str] = Field(default_factory=list)
    format: str = ""
    status: str = ""
    primaryRole: str = ""
    additionalRoles: List[str] = Field(default_factory=list)
    crewScale: str = ""
    synopsis: str = ""
    logline: str = ""
    durationValue: str = ""
    durationUnit: str = ""  # min | hour
    duration: str = ""
    posterUrl: str = ""
    watchLink: str = ""
    trailerUrl: str = ""
    press: str = ""
    achievements: List[FilmAchievement] = Field(default_factory=list)

    model_config = {"extra": "ignore"}

    @field_validator(
        "id", "title", "year", "format", "status", "primaryRole", "crewScale",
        "synopsis", "logline", "durationValue", "durationUnit", "duration",
        "posterUrl", "watchLink", "trailerUrl", "press",
        mode="before",
    )
    @classmethod
    def _text(cls, value: Any) -> str:
        return as_text(value)

    @field_validator("achievements", mode="before")
    @classmethod
    def _never_null(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []

    @property
    def duration_label(self) -> str:
        if self.durationValue and self.durationUnit:
            return f"{self.durationValue} {self.durationUnit}"
        return self.duration


class ProfileData(BaseModel):
    """Canonical filmmaker record. Field names follow the wizard (camelCase) convention."""
    # Personal
    stageName: str = ""
    legalName: str = ""
    email: str = ""
    phone: str = ""
    pronouns: str = ""
    dateOfBirth: str = ""
    profilePhoto: str = ""

    # Location
    country: str = ""
    currentState: str = ""
    currentCity: str = ""
    # Single free-text location from legacy rows; wins over city/state/country
    currentLocation: str = ""
    nativeState: str = ""
    nativeCity: str = ""
    nationality: str = ""
    languages: str = ""
    preferredContact: str = ""

    # Professional
    primaryRoles: List[str] = Field(default_factory=list)
    secondaryRoles: List[str] = Field(default_factory=list)
    yearsActive: str = ""
    preferredGenres: List[str] = Field(default_factory=list)
    visualStyle: str = ""
    creativeInfluences: str = ""
    creativePhilosophy: str = ""
    beliefAboutCinema: str = ""
    messageOrIntent: str = ""
    creativeSignature: str = ""
    openToCollaborations: str = ""
    availability: str = ""
    preferredWorkLocation: str = ""

    # Filmography
    filmography: List[FilmographyEntry] = Field(default_factory=list)

    # Free-text recognition carried over from legacy rows
    awards: str = ""
    screenings: str = ""
    press: str = ""

    # Social
    instagram: str = ""
    youtube: str = ""
    imdb: str = ""
    linkedin: str = ""
    twitter: str = ""
    facebook: str = ""
    website: str = ""
    letterboxd: str = ""

    # Education
    educationTraining: str = ""
    schooling: str = ""
    higherSecondary: str = ""
    undergraduate: str = ""
    postgraduate: str = ""
    phd: str = ""
    certifications: str = ""

    aiBio: str = ""
    isComplete: bool = False
    lastUpdated: Optional[datetime] = None

    model_config = {"extra": "ignore"}

    @property
    def display_location(self) -> str:
        """currentLocation, else "city, state, country" (non-empty parts), else the placeholder."""
        if self.currentLocation:
            return self.currentLocation
        parts = (self.currentCity, self.currentState, self.country)
        return ", ".join(p for p in parts if p) or LOCATION_PLACEHOLDER


# --- Intake variants ---
class WizardIntake(BaseModel):
    """Draft blob produced by the profile wizard (camelCase keys)."""
    source: Literal["wizard"] = "wizard"
    data: dict[str, Any] = Field(default_factory=dict)


class LegacyIngestRow(BaseModel):
    """Row posted by the legacy bulk-ingestion path (snake_case keys, `name` required)."""
    source: Literal["legacy"] = "legacy"
    name: str
    profile_url: Optional[str] = None

    model_config = {"extra": "allow"}

    @field_validator("name", mode="before")
    @classmethod
    def _name_text(cls, value: Any) -> str:
        return as_text(value)

    def raw_form_data(self) -> dict[str, Any]:
        """Everything except the envelope fields, as stored in filmmakers.raw_form_data."""
        return dict(self.model_extra or {})


IntakeRecord = Annotated[Union[WizardIntake, LegacyIngestRow], Field(discriminator="source")]
