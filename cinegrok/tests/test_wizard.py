"""Tests for the profile builder wizard state machine"""
import itertools
import random

from cinegrok.app.core.config import MAX_PRIMARY_ROLES, MAX_SECONDARY_ROLES, MAX_TOTAL_ROLES
from cinegrok.app.schemas.profile import ProfileData
from cinegrok.app.services.wizard import (
    ProfileWizard,
    parse_step,
    step_from_address,
    validate_for_publish,
)


def _personal(wizard):
    wizard.update({
        "stageName": "Arjun Mehta",
        "email": "a@x.com",
        "country": "India",
        "profilePhoto": "https://cdn.example.com/arjun.jpg",
    })


def test_new_session_to_role_limit():
    """Fill Personal, advance, pick two primary roles, a third is rejected."""
    wizard = ProfileWizard()
    assert wizard.step == 1
    _personal(wizard)
    assert wizard.next() == {}
    assert wizard.step == 2
    assert wizard.step_name == "Professional"

    assert wizard.toggle_role("Director", "primary").changed
    assert wizard.toggle_role("Cinematographer", "primary").changed
    result = wizard.toggle_role("Editor", "primary")
    assert not result.changed
    assert result.warning == "You can select a maximum of 2 Primary Roles."
    assert wizard.profile.primaryRoles == ["Director", "Cinematographer"]


def test_next_blocked_on_invalid_personal_step():
    wizard = ProfileWizard()
    wizard.update({"stageName": "Arjun", "email": "not-an-email"})
    errors = wizard.next()
    assert wizard.step == 1
    assert errors["email"] == "Please enter a valid email address"
    assert set(errors) == {"profilePhoto", "email", "country"}
    assert wizard.history == []


def test_professional_requires_a_primary_role():
    wizard = ProfileWizard(step=2)
    assert wizard.next() == {"roles": "Please select at least one primary role"}
    wizard.toggle_role("Director", "primary")
    assert wizard.next() == {}
    assert wizard.step == 3


def test_later_steps_advance_without_validation():
    wizard = ProfileWizard(step=3)
    assert wizard.next() == {}
    assert wizard.step == 4


def test_step_is_clamped():
    assert ProfileWizard(step=0).step == 1
    assert ProfileWizard(step=99).step == 6
    wizard = ProfileWizard(step=6)
    wizard.next()
    assert wizard.step == 6
    wizard = ProfileWizard()
    assert wizard.back() == 1


def test_parse_step():
    assert parse_step("3") == 3
    assert parse_step("abc") == 1
    assert parse_step(None) == 1
    assert parse_step("42") == 6
    assert parse_step("-1") == 1


def test_go_to_only_reaches_earlier_steps():
    wizard = ProfileWizard(step=4)
    assert not wizard.go_to(5)
    assert not wizard.go_to(4)
    assert wizard.step == 4
    assert wizard.go_to(2)
    assert wizard.step == 2
    assert wizard.history == ["?step=2"]


def test_navigation_pushes_history_and_popstate_does_not():
    wizard = ProfileWizard(step=3)
    wizard.next()
    wizard.back()
    assert wizard.history == ["?step=4", "?step=3"]
    assert wizard.on_popstate("/profile-builder?step=5") == 5
    assert wizard.step == 5
    assert wizard.history == ["?step=4", "?step=3"]


def test_navigation_at_the_ends_pushes_nothing():
    wizard = ProfileWizard(step=6)
    assert wizard.next() == {}
    assert wizard.step == 6
    wizard = ProfileWizard(step=1)
    assert wizard.back() == 1
    assert wizard.history == []
    wizard = ProfileWizard(step=5)
    wizard.next()
    wizard.next()
    assert wizard.history == ["?step=6"]


def test_step_from_address():
    assert step_from_address("https://cinegrok.example/profile-builder?step=4") == 4
    assert step_from_address("?step=2") == 2
    assert step_from_address("step=x") == 1
    assert step_from_address("") == 1


def test_update_ignores_fields_of_other_steps():
    wizard = ProfileWizard()
    result = wizard.update({"stageName": "Arjun", "instagram": "https://instagram.com/a", "primaryRoles": ["Director"]})
    assert result.applied == ["stageName"]
    assert result.ignored == ["instagram", "primaryRoles"]
    assert wizard.profile.stageName == "Arjun"
    assert wizard.profile.instagram == ""
    assert wizard.profile.primaryRoles == []


def test_total_role_limit():
    wizard = ProfileWizard(step=2)
    for role, kind in (("Director", "primary"), ("Writer", "primary"), ("Editor", "secondary"), ("Producer", "secondary")):
        assert wizard.toggle_role(role, kind).changed
    result = wizard.toggle_role("Actor", "secondary")
    assert not result.changed
    assert result.warning == "Total roles limit reached (max 4)."


def test_secondary_role_limit():
    wizard = ProfileWizard(step=2)
    wizard.toggle_role("Editor", "secondary")
    wizard.toggle_role("Writer", "secondary")
    result = wizard.toggle_role("Producer", "secondary")
    assert result.warning == "You can select a maximum of 2 Secondary Roles."
    assert wizard.profile.secondaryRoles == ["Editor", "Writer"]


def test_selecting_role_in_other_list_moves_it():
    wizard = ProfileWizard(step=2)
    wizard.toggle_role("Director", "primary")
    wizard.toggle_role("Editor", "secondary")
    result = wizard.toggle_role("Editor", "primary")
    assert result.changed
    assert wizard.profile.primaryRoles == ["Director", "Editor"]
    assert wizard.profile.secondaryRoles == []


def test_move_does_not_count_against_total():
    wizard = ProfileWizard(step=2)
    wizard.toggle_role("Director", "primary")
    wizard.toggle_role("Editor", "secondary")
    wizard.toggle_role("Writer", "secondary")
    wizard.toggle_role("Producer", "primary")
    # Four roles held; moving Editor to primary is blocked only by the primary cap
    result = wizard.toggle_role("Editor", "primary")
    assert result.warning == "You can select a maximum of 2 Primary Roles."
    wizard.toggle_role("Producer", "primary")
    assert wizard.toggle_role("Editor", "primary").changed
    assert not set(wizard.profile.primaryRoles) & set(wizard.profile.secondaryRoles)


def test_toggle_deselects():
    wizard = ProfileWizard(step=2)
    wizard.toggle_role("Director", "primary")
    assert wizard.toggle_role("Director", "primary").changed
    assert wizard.profile.primaryRoles == []


def test_custom_role_joins_display_list():
    wizard = ProfileWizard(step=2)
    result = wizard.add_custom_role("  Puppeteer ", "secondary")
    assert result.changed
    assert wizard.profile.secondaryRoles == ["Puppeteer"]
    assert wizard.display_roles()[-1] == "Puppeteer"
    assert wizard.custom_roles == ["Puppeteer"]


def test_custom_role_matching_known_role_toggles_it():
    wizard = ProfileWizard(step=2)
    wizard.add_custom_role("Director", "primary")
    assert wizard.custom_roles == []
    assert wizard.profile.primaryRoles == ["Director"]
    assert not wizard.add_custom_role("   ", "primary").changed


def test_film_crud():
    wizard = ProfileWizard(step=3)
    film = wizard.add_film({"title": "Monsoon", "crewScale": "2-5"})
    assert film.crewScale == "Small (2-5)"
    updated = wizard.update_film(film.id, {"year": "2021", "id": "hijack", "achievements": "x"})
    assert updated.year == "2021"
    assert updated.id == film.id
    assert wizard.update_film("missing", {"year": "2020"}) is None
    assert wizard.remove_film(film.id)
    assert not wizard.remove_film(film.id)
    assert wizard.profile.filmography == []


def test_added_film_ids_are_unique():
    wizard = ProfileWizard(step=3)
    first = wizard.add_film({"id": "same"})
    second = wizard.add_film({"id": "same"})
    assert first.id != second.id


def test_achievement_type_change_rederives_result():
    wizard = ProfileWizard(step=3)
    film = wizard.add_film({"title": "Monsoon"})
    achievement = wizard.add_achievement(film.id)
    assert (achievement.type, achievement.result, achievement.eventCategory) == ("award", "won", "festival")

    updated = wizard.update_achievement(film.id, achievement.id, "type", "nomination")
    assert updated.result == "nominated"
    updated = wizard.update_achievement(film.id, achievement.id, "type", "official_selection")
    assert updated.result == "selected"
    assert wizard.profile.filmography[0].achievements[0].result == "selected"


def test_achievement_result_is_not_editable():
    wizard = ProfileWizard(step=3)
    film = wizard.add_film()
    achievement = wizard.add_achievement(film.id)
    try:
        wizard.update_achievement(film.id, achievement.id, "result", "nominated")
    except ValueError as e:
        assert "result" in str(e)
    else:
        raise AssertionError("result edit should be rejected")


def test_remove_achievement():
    wizard = ProfileWizard(step=3)
    film = wizard.add_film()
    achievement = wizard.add_achievement(film.id)
    assert wizard.add_achievement("missing") is None
    assert wizard.remove_achievement(film.id, achievement.id)
    assert not wizard.remove_achievement(film.id, achievement.id)


def test_publish_validation_allows_zero_films():
    profile = ProfileData(stageName="Arjun", email="a@x.com", country="India", primaryRoles=["Director"])
    assert validate_for_publish(profile) == {}
    assert set(validate_for_publish(ProfileData())) == {"stageName", "email", "country", "roles"}


def test_leave_confirmation_threshold():
    wizard = ProfileWizard()
    wizard.update({"stageName": "A", "email": "a@x.com", "country": "India"})
    assert not wizard.has_unsaved_data()
    wizard.update({"phone": "1", "pronouns": "they/them", "currentCity": "Pune"})
    assert wizard.has_unsaved_data()


def test_draft_round_trip_keeps_step_and_custom_roles():
    wizard = ProfileWizard(step=2)
    wizard.add_custom_role("Puppeteer", "primary")
    restored = ProfileWizard.from_draft(**wizard.to_draft())
    assert restored.step == 2
    assert restored.custom_roles == ["Puppeteer"]
    assert restored.profile.primaryRoles == ["Puppeteer"]


ROLE_POOL = ["Director", "Writer", "Editor", "Producer", "Cinematographer", "Actor"]


def _assert_role_invariants(wizard):
    primary, secondary = wizard.profile.primaryRoles, wizard.profile.secondaryRoles
    assert len(primary) <= MAX_PRIMARY_ROLES
    assert len(secondary) <= MAX_SECONDARY_ROLES
    assert len(primary) + len(secondary) <= MAX_TOTAL_ROLES
    assert not set(primary) & set(secondary)
    assert len(set(primary)) == len(primary)
    assert len(set(secondary)) == len(secondary)


def test_role_invariants_hold_for_every_toggle_sequence():
    ops = [(role, kind) for role in ROLE_POOL[:5] for kind in ("primary", "secondary")]
    for sequence in itertools.product(ops, repeat=4):
        wizard = ProfileWizard(step=2)
        for role, kind in sequence:
            before = (list(wizard.profile.primaryRoles), list(wizard.profile.secondaryRoles))
            result = wizard.toggle_role(role, kind)
            after = (wizard.profile.primaryRoles, wizard.profile.secondaryRoles)
            if not result.changed:
                assert after == before
                assert result.warning
            _assert_role_invariants(wizard)


def test_role_invariants_hold_on_random_walk_with_custom_roles():
    rng = random.Random(20240611)
    customs = ["Puppeteer", "Foley Artist", " Director ", "Colorist"]
    wizard = ProfileWizard(step=2)
    for _ in range(3000):
        kind = rng.choice(["primary", "secondary"])
        if rng.random() < 0.25:
            wizard.add_custom_role(rng.choice(customs), kind)
        else:
            wizard.toggle_role(rng.choice(ROLE_POOL + wizard.custom_roles), kind)
        _assert_role_invariants(wizard)
    assert len(wizard.custom_roles) == len(set(wizard.custom_roles))
