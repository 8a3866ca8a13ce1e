"""
Filmography statistics for the producer view, chip badges and analytics.

Category maps keep first-seen insertion order. Films with an empty value for a
category are skipped for that category; no "Unknown" bucket is ever created.
"""
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from cinegrok.app.schemas.profile import FilmAchievement, FilmographyEntry


class FilmStats(BaseModel):
    by_status: dict[str, int] = Field(default_factory=dict)
    by_format: dict[str, int] = Field(default_factory=dict)
    by_primary_role: dict[str, int] = Field(default_factory=dict)
    # Role exposure: primary role plus every additional role, so totals can exceed film count
    by_role: dict[str, int] = Field(default_factory=dict)
    by_crew_scale: dict[str, int] = Field(default_factory=dict)
    by_genre: dict[str, int] = Field(default_factory=dict)
    total_films: int = 0


class AchievementEntry(BaseModel):
    achievement: FilmAchievement
    filmTitle: str = ""
    filmYear: str = ""


class AchievementStats(BaseModel):
    wins: int = 0
    nominations: int = 0
    selections: int = 0
    screenings: int = 0
    flat_list: list[AchievementEntry] = Field(default_factory=list)

    @property
    def has_achievements(self) -> bool:
        return bool(self.flat_list)


_RESULT_COUNTERS = {
    "won": "wins",
    "nominated": "nominations",
    "selected": "selections",
    "screened": "screenings",
}


def _bump(counts: dict[str, int], value: Optional[str]) -> None:
    if value:
        counts[value] = counts.get(value, 0) + 1


def aggregate(films: Iterable[FilmographyEntry]) -> FilmStats:
    """Single pass fold of a filmography into category counts."""
    stats = FilmStats()
    for film in films:
        stats.total_films += 1
        _bump(stats.by_status, film.status)
        _bump(stats.by_format, film.format)
        _bump(stats.by_crew_scale, film.crewScale)
        _bump(stats.by_primary_role, film.primaryRole)
        _bump(stats.by_role, film.primaryRole)
        for role in film.additionalRoles:
            _bump(stats.by_role, role)
        for genre in film.genres:
            _bump(stats.by_genre, genre)
    return stats


def aggregate_achievements(films: Iterable[FilmographyEntry]) -> AchievementStats:
    """
    Count achievements by result and build the flat list, newest first.

    Years are compared as strings, so "2024" > "2019" as expected but a
    3-digit year like "999" sorts above "2020" and a blank year sorts last.
    """
    stats = AchievementStats()
    entries: list[AchievementEntry] = []
    for film in films:
        for achievement in film.achievements:
            counter = _RESULT_COUNTERS.get(achievement.result)
            if counter:
                setattr(stats, counter, getattr(stats, counter) + 1)
            entries.append(
                AchievementEntry(achievement=achievement, filmTitle=film.title, filmYear=film.year)
            )
    stats.flat_list = sorted(entries, key=lambda entry: entry.achievement.year, reverse=True)
    return stats


def sort_films_by_year(films: Iterable[FilmographyEntry]) -> list[FilmographyEntry]:
    """Activity table order: year descending, string comparison, stable."""
    return sorted(films, key=lambda film: film.year, reverse=True)


def chart_series(counts: dict[str, int]) -> list[dict]:
    """Bar chart rows in insertion order."""
    return [{"name": name, "value": value} for name, value in counts.items()]
