"""
Profile builder wizard - six ordered steps over a canonical ProfileData.

The current step is mirrored into the address (`?step=n`). Changes driven by
next/back/go_to push a history entry; changes driven by browser back/forward
(on_popstate) only sync the step.
"""
from __future__ import annotations

from typing import Any, Literal, Optional
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel, Field

from cinegrok.app.core.config import (
    EDUCATION_KEYS,
    EMAIL_PATTERN,
    FIRST_STEP,
    LAST_STEP,
    MAX_PRIMARY_ROLES,
    MAX_SECONDARY_ROLES,
    MAX_TOTAL_ROLES,
    SOCIAL_LINK_KEYS,
    STANDARD_ROLES,
    UNSAVED_FIELDS_THRESHOLD,
    WIZARD_STEPS,
)
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.schemas.profile import FilmAchievement, FilmographyEntry, ProfileData
from cinegrok.app.services.field_reconciliation import normalize_film, normalize_profile

logger = get_logger("services.wizard")

RoleKind = Literal["primary", "secondary"]

# Fields each step may write. Role lists and filmography are edited through
# their own operations so the role and film invariants always hold.
STEP_FIELDS: dict[int, frozenset[str]] = {
    1: frozenset({
        "stageName", "legalName", "email", "phone", "pronouns", "dateOfBirth",
        "profilePhoto", "country", "currentState", "currentCity", "nativeState",
        "nativeCity", "nationality", "languages", "preferredContact",
    }),
    2: frozenset({
        "yearsActive", "preferredGenres", "visualStyle", "creativeInfluences",
        "creativePhilosophy", "beliefAboutCinema", "messageOrIntent",
        "creativeSignature", "openToCollaborations", "availability",
        "preferredWorkLocation",
    }),
    3: frozenset({"awards", "screenings", "press"}),
    4: frozenset(SOCIAL_LINK_KEYS),
    5: frozenset({"educationTraining", *EDUCATION_KEYS}),
    6: frozenset(),
}

_ACHIEVEMENT_EDITABLE = frozenset(FilmAchievement.model_fields) - {"id", "result"}
_FILM_EDITABLE = frozenset(FilmographyEntry.model_fields) - {"id", "achievements"}


class RoleSelection(BaseModel):
    changed: bool
    warning: Optional[str] = None
    primaryRoles: list[str] = Field(default_factory=list)
    secondaryRoles: list[str] = Field(default_factory=list)


class UpdateResult(BaseModel):
    applied: list[str] = Field(default_factory=list)
    ignored: list[str] = Field(default_factory=list)


def clamp_step(step: int) -> int:
    return max(FIRST_STEP, min(LAST_STEP, step))


def parse_step(value: Any) -> int:
    """Step from a query value; anything non-numeric is step 1."""
    try:
        return clamp_step(int(str(value).strip()))
    except (TypeError, ValueError):
        return FIRST_STEP


def step_from_address(url_or_query: str) -> int:
    """Accepts a full URL, a path with a query, or a bare query string."""
    text = url_or_query or ""
    query = urlsplit(text).query if "?" in text else text.lstrip("?")
    values = parse_qs(query).get("step")
    return parse_step(values[0]) if values else FIRST_STEP


def validate_personal(profile: ProfileData) -> dict[str, str]:
    errors: dict[str, str] = {}
    if not profile.profilePhoto:
        errors["profilePhoto"] = "Profile photo is required"
    if not profile.stageName:
        errors["stageName"] = "Stage name is required"
    if not profile.email:
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(profile.email):
        errors["email"] = "Please enter a valid email address"
    if not profile.country:
        errors["country"] = "Country is required"
    return errors


def validate_professional(profile: ProfileData) -> dict[str, str]:
    if not profile.primaryRoles:
        return {"roles": "Please select at least one primary role"}
    return {}


def validate_for_publish(profile: ProfileData) -> dict[str, str]:
    """Stage name, email, country and a primary role. Zero films is valid."""
    errors: dict[str, str] = {}
    if not profile.stageName:
        errors["stageName"] = "Stage name is required"
    if not profile.email:
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(profile.email):
        errors["email"] = "Please enter a valid email address"
    if not profile.country:
        errors["country"] = "Country is required"
    errors.update(validate_professional(profile))
    return errors


_STEP_VALIDATORS = {
    1: validate_personal,
    2: validate_professional,
}


class ProfileWizard:
    """In-memory wizard session. Persist with to_draft() / from_draft()."""

    def __init__(
        self,
        profile: Optional[ProfileData] = None,
        step: int = FIRST_STEP,
        custom_roles: Optional[list[str]] = None,
    ):
        self.profile = profile or ProfileData()
        self.step = clamp_step(step)
        self.custom_roles: list[str] = list(custom_roles or [])
        self.history: list[str] = []

    # --- Persistence ---
    @classmethod
    def from_draft(
        cls,
        draft_data: Optional[dict],
        current_step: int = FIRST_STEP,
        custom_roles: Optional[list[str]] = None,
    ) -> "ProfileWizard":
        return cls(normalize_profile(draft_data or {}), current_step, custom_roles)

    def to_draft(self) -> dict[str, Any]:
        return {
            "draft_data": self.profile.model_dump(mode="json"),
            "current_step": self.step,
            "custom_roles": list(self.custom_roles),
        }

    # --- Navigation ---
    @property
    def step_name(self) -> str:
        return WIZARD_STEPS[self.step - 1]

    def set_step(self, step: int) -> int:
        self.step = clamp_step(step)
        return self.step

    def _push(self) -> None:
        self.history.append(f"?step={self.step}")

    def validate_step(self, step: Optional[int] = None) -> dict[str, str]:
        validator = _STEP_VALIDATORS.get(step or self.step)
        return validator(self.profile) if validator else {}

    def _move(self, step: int) -> None:
        """Set the step; an address entry is pushed only when the step changes."""
        previous = self.step
        if self.set_step(step) != previous:
            self._push()

    def next(self) -> dict[str, str]:
        """Validate the step being left; advance only when it is valid."""
        errors = self.validate_step()
        if errors:
            logger.info("Wizard step blocked step=%s fields=%s", self.step, sorted(errors))
            return errors
        self._move(self.step + 1)
        return {}

    def back(self) -> int:
        self._move(self.step - 1)
        return self.step

    def go_to(self, step: int) -> bool:
        """Step-indicator click: only earlier steps are reachable."""
        if step >= self.step or step < FIRST_STEP:
            return False
        self._move(step)
        return True

    def on_popstate(self, url_or_query: str) -> int:
        """Browser back/forward: follow the address without pushing a new entry."""
        return self.set_step(step_from_address(url_or_query))

    # --- Field edits ---
    def update(self, fields: dict[str, Any]) -> UpdateResult:
        """Merge the current step's own fields; anything else is reported as ignored."""
        owned = STEP_FIELDS.get(self.step, frozenset())
        result = UpdateResult()
        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if key in owned:
                changes[key] = value
                result.applied.append(key)
            else:
                result.ignored.append(key)
        if result.ignored:
            logger.debug("Wizard update ignored step=%s keys=%s", self.step, result.ignored)
        if changes:
            merged = {**self.profile.model_dump(), **changes}
            self.profile = ProfileData.model_validate(merged)
        return result

    def has_unsaved_data(self) -> bool:
        populated = [
            name for name, value in self.profile.model_dump(exclude={"isComplete", "lastUpdated"}).items()
            if value
        ]
        return len(populated) > UNSAVED_FIELDS_THRESHOLD

    # --- Roles ---
    def display_roles(self) -> list[str]:
        extra = self.custom_roles + [
            role for role in self.profile.primaryRoles + self.profile.secondaryRoles
            if role not in STANDARD_ROLES
        ]
        custom: list[str] = []
        for role in extra:
            if role not in STANDARD_ROLES and role not in custom:
                custom.append(role)
        return list(STANDARD_ROLES) + custom

    def _selection(self, changed: bool, warning: Optional[str] = None) -> RoleSelection:
        return RoleSelection(
            changed=changed,
            warning=warning,
            primaryRoles=list(self.profile.primaryRoles),
            secondaryRoles=list(self.profile.secondaryRoles),
        )

    def toggle_role(self, role: str, kind: RoleKind) -> RoleSelection:
        """
        Select or deselect a role. Selecting a role held by the other list moves
        it. Exceeding a limit changes nothing and returns a warning.
        """
        primary = list(self.profile.primaryRoles)
        secondary = list(self.profile.secondaryRoles)
        target, other = (primary, secondary) if kind == "primary" else (secondary, primary)

        if role in target:
            target.remove(role)
        else:
            moving = role in other
            total = len(primary) + len(secondary) - (1 if moving else 0)
            if total >= MAX_TOTAL_ROLES:
                return self._selection(False, f"Total roles limit reached (max {MAX_TOTAL_ROLES}).")
            if kind == "primary" and len(primary) >= MAX_PRIMARY_ROLES:
                return self._selection(
                    False, f"You can select a maximum of {MAX_PRIMARY_ROLES} Primary Roles."
                )
            if kind == "secondary" and len(secondary) >= MAX_SECONDARY_ROLES:
                return self._selection(
                    False, f"You can select a maximum of {MAX_SECONDARY_ROLES} Secondary Roles."
                )
            if moving:
                other.remove(role)
            target.append(role)

        self.profile = self.profile.model_copy(
            update={"primaryRoles": primary, "secondaryRoles": secondary}
        )
        return self._selection(True)

    def add_custom_role(self, value: str, kind: RoleKind) -> RoleSelection:
        """
        Free-text role. An exact match of a known role toggles it; otherwise the
        role joins this session's custom roles and is then selected.
        """
        role = (value or "").strip()
        if not role:
            return self._selection(False)
        if role in self.display_roles():
            return self.toggle_role(role, kind)
        self.custom_roles.append(role)
        return self.toggle_role(role, kind)

    # --- Filmography ---
    def _film_index(self, film_id: str) -> Optional[int]:
        for index, film in enumerate(self.profile.filmography):
            if film.id == film_id:
                return index
        return None

    def _replace_films(self, films: list[FilmographyEntry]) -> None:
        self.profile = self.profile.model_copy(update={"filmography": films})

    def add_film(self, fields: Optional[dict[str, Any]] = None) -> FilmographyEntry:
        film = normalize_film(fields or {}) or FilmographyEntry()
        existing = {entry.id for entry in self.profile.filmography}
        if film.id in existing:
            film = film.model_copy(update={"id": FilmographyEntry().id})
        self._replace_films([*self.profile.filmography, film])
        return film

    def update_film(self, film_id: str, fields: dict[str, Any]) -> Optional[FilmographyEntry]:
        index = self._film_index(film_id)
        if index is None:
            return None
        films = list(self.profile.filmography)
        changes = {key: value for key, value in fields.items() if key in _FILM_EDITABLE}
        films[index] = FilmographyEntry.model_validate({**films[index].model_dump(), **changes})
        self._replace_films(films)
        return films[index]

    def remove_film(self, film_id: str) -> bool:
        films = [film for film in self.profile.filmography if film.id != film_id]
        if len(films) == len(self.profile.filmography):
            return False
        self._replace_films(films)
        return True

    def add_achievement(self, film_id: str) -> Optional[FilmAchievement]:
        index = self._film_index(film_id)
        if index is None:
            return None
        achievement = FilmAchievement(type="award", eventCategory="festival")
        films = list(self.profile.filmography)
        film = films[index]
        films[index] = film.model_copy(update={"achievements": [*film.achievements, achievement]})
        self._replace_films(films)
        return achievement

    def update_achievement(
        self, film_id: str, achievement_id: str, field: str, value: Any
    ) -> Optional[FilmAchievement]:
        """Edit one field. Changing `type` re-derives `result`; `result` itself is not editable."""
        if field not in _ACHIEVEMENT_EDITABLE:
            raise ValueError(f"Field '{field}' cannot be edited")
        index = self._film_index(film_id)
        if index is None:
            return None
        films = list(self.profile.filmography)
        film = films[index]
        achievements = list(film.achievements)
        for pos, achievement in enumerate(achievements):
            if achievement.id == achievement_id:
                data = achievement.model_dump()
                data[field] = value
                data.pop("result", None)
                achievements[pos] = FilmAchievement.model_validate(data)
                films[index] = film.model_copy(update={"achievements": achievements})
                self._replace_films(films)
                return achievements[pos]
        return None

    def remove_achievement(self, film_id: str, achievement_id: str) -> bool:
        index = self._film_index(film_id)
        if index is None:
            return False
        films = list(self.profile.filmography)
        film = films[index]
        kept = [a for a in film.achievements if a.id != achievement_id]
        if len(kept) == len(film.achievements):
            return False
        films[index] = film.model_copy(update={"achievements": kept})
        self._replace_films(films)
        return True

    # --- Publish ---
    def publish_errors(self) -> dict[str, str]:
        return validate_for_publish(self.profile)

    def state(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "step_name": self.step_name,
            "steps": list(WIZARD_STEPS),
            "data": self.profile.model_dump(mode="json"),
            "display_roles": self.display_roles(),
            "custom_roles": list(self.custom_roles),
            "history": list(self.history),
            "needs_leave_confirmation": self.has_unsaved_data(),
        }
