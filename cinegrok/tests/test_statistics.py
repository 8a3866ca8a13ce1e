"""Tests for filmography and achievement aggregation"""
from cinegrok.app.schemas.profile import FilmAchievement, FilmographyEntry
from cinegrok.app.services.statistics import (
    aggregate,
    aggregate_achievements,
    chart_series,
    sort_films_by_year,
)


def test_single_film_role_exposure():
    """One film, primary Director plus additional Editor: two role increments."""
    stats = aggregate([FilmographyEntry(title="One", primaryRole="Director", additionalRoles=["Editor"])])
    assert stats.by_primary_role == {"Director": 1}
    assert stats.by_role == {"Director": 1, "Editor": 1}
    assert sum(stats.by_role.values()) == 2
    assert stats.total_films == 1


def test_role_totals_can_exceed_film_count():
    films = [
        FilmographyEntry(primaryRole="Director", additionalRoles=["Writer", "Editor"], genres=["Drama", "Thriller"]),
        FilmographyEntry(primaryRole="Director", genres=["Drama"]),
    ]
    stats = aggregate(films)
    assert sum(stats.by_role.values()) == 4 > len(films)
    assert stats.by_genre == {"Drama": 2, "Thriller": 1}


def test_role_totals_equal_primary_count_without_additional_roles():
    films = [FilmographyEntry(primaryRole="Director"), FilmographyEntry(primaryRole="Editor"), FilmographyEntry()]
    stats = aggregate(films)
    assert sum(stats.by_role.values()) == 2
    assert stats.by_role == stats.by_primary_role


def test_missing_categories_are_dropped():
    stats = aggregate([FilmographyEntry(status="Released"), FilmographyEntry(status="")])
    assert stats.by_status == {"Released": 1}
    assert "Unknown" not in stats.by_format
    assert stats.by_format == {}


def test_insertion_order_is_first_seen():
    films = [
        FilmographyEntry(format="Short Film"),
        FilmographyEntry(format="Feature Film"),
        FilmographyEntry(format="Short Film"),
    ]
    assert list(aggregate(films).by_format) == ["Short Film", "Feature Film"]
    assert chart_series(aggregate(films).by_format) == [
        {"name": "Short Film", "value": 2},
        {"name": "Feature Film", "value": 1},
    ]


def test_achievement_counts_and_sort():
    film = FilmographyEntry(
        title="Monsoon",
        year="2021",
        achievements=[
            FilmAchievement(type="award", result="won", year="2019"),
            FilmAchievement(type="nomination", result="nominated", year="2024"),
            FilmAchievement(type="screening", result="screened", year="2023"),
        ],
    )
    stats = aggregate_achievements([film])
    assert (stats.wins, stats.nominations, stats.screenings, stats.selections) == (1, 1, 1, 0)
    assert [entry.achievement.year for entry in stats.flat_list] == ["2024", "2023", "2019"]
    assert all(entry.filmTitle == "Monsoon" and entry.filmYear == "2021" for entry in stats.flat_list)
    assert stats.has_achievements


def test_achievement_years_sort_as_strings():
    """A 3-digit year sorts above 4-digit years and a blank year sorts last."""
    film = FilmographyEntry(achievements=[
        FilmAchievement(year="2020"),
        FilmAchievement(year=""),
        FilmAchievement(year="999"),
    ])
    years = [entry.achievement.year for entry in aggregate_achievements([film]).flat_list]
    assert years == ["999", "2020", ""]


def test_no_achievements():
    stats = aggregate_achievements([FilmographyEntry()])
    assert stats.flat_list == []
    assert not stats.has_achievements


def test_sort_films_by_year_is_stable():
    films = [
        FilmographyEntry(title="A", year="2020"),
        FilmographyEntry(title="B", year="2022"),
        FilmographyEntry(title="C", year="2020"),
    ]
    assert [film.title for film in sort_films_by_year(films)] == ["B", "A", "C"]


def test_result_is_derived_from_type():
    assert FilmAchievement(type="official_selection", result="won").result == "selected"
    assert FilmAchievement(type="bogus").type == "award"
    assert FilmAchievement(eventCategory="weird").eventCategory == "other"
    custom = FilmAchievement(category="Custom", customCategory="Best Sound")
    assert custom.display_category == "Best Sound"
