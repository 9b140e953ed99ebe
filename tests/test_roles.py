"""Tests for role resolution."""

import pytest

from afterparty.config.roster import RosterPreset, TeamGroup
from afterparty.utils.constants import ParticipantRole
from afterparty.utils.roles import (
    RoleResolver,
    build_role_match_sets,
    normalize_participant_name,
    resolve_role,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Annie", "annie"),
        ("  annie  (매니저) ", "annie"),
        ("2팀 annie", "annie"),
        ("3 team   Devin", "devin"),
        ("Team 3 devin", "devin"),
        ("1팀 2팀 kev", "kev"),
        ("12 Alen", "alen"),
        ("김  지웅", "김 지웅"),
    ],
)
def test_normalize_participant_name(raw, expected):
    assert normalize_participant_name(raw) == expected


def test_mentor_wins_over_angel():
    """A name that is both a mentor and an angel resolves to mentor."""
    match_sets = build_role_match_sets()
    angel_set = {"alen"}

    assert resolve_role("Alen", angel_set, match_sets) == ParticipantRole.MENTOR
    assert resolve_role("2팀 alen (angel)", angel_set, match_sets) == ParticipantRole.MENTOR


def test_precedence_order():
    match_sets = build_role_match_sets(
        special_roles={"manager": ["dana"], "supporter": ["dana", "eve"], "buddy": ["eve", "finn"]},
        defaults={}
    )
    angel_set = {"dana", "eve"}

    assert resolve_role("dana", angel_set, match_sets) == ParticipantRole.MANAGER
    assert resolve_role("eve", angel_set, match_sets) == ParticipantRole.ANGEL
    assert resolve_role("finn", angel_set, match_sets) == ParticipantRole.BUDDY
    assert resolve_role("gus", angel_set, match_sets) == ParticipantRole.ATTENDEE


def test_caller_list_replaces_default_per_role():
    match_sets = build_role_match_sets(special_roles={"mentor": ["zoe"]})

    # Mentor list comes from the caller, the rest fall back to the presets
    assert match_sets[ParticipantRole.MENTOR] == {"zoe"}
    assert match_sets[ParticipantRole.MANAGER] == {"annie"}
    assert resolve_role("kev", set(), match_sets) == ParticipantRole.ATTENDEE
    assert resolve_role("Annie", set(), match_sets) == ParticipantRole.MANAGER


def test_empty_caller_list_disables_role():
    match_sets = build_role_match_sets(special_roles={"manager": []})
    assert resolve_role("annie", set(), match_sets) == ParticipantRole.ATTENDEE


def test_unknown_role_in_presets_is_rejected():
    with pytest.raises(ValueError):
        build_role_match_sets(special_roles={"captain": ["amy"]})


def test_resolver_from_roster():
    roster = RosterPreset(
        team_groups=[TeamGroup(team_name="1팀", angel="Hana", members=["Jin", "Min"])],
        fixed_angels=["Sora"],
        special_roles={"buddy": ["Min"]}
    )
    resolver = RoleResolver.from_roster(roster)

    assert resolver.resolve("hana") == ParticipantRole.ANGEL
    assert resolver.resolve("1팀 Sora") == ParticipantRole.ANGEL
    assert resolver.resolve("Min") == ParticipantRole.BUDDY
    assert resolver.resolve("Jin") == ParticipantRole.ATTENDEE
    # Roles the roster leaves out keep their presets
    assert resolver.resolve("devin") == ParticipantRole.MENTOR


def test_resolver_without_defaults():
    resolver = RoleResolver(defaults={})
    assert resolver.resolve("annie") == ParticipantRole.ATTENDEE
