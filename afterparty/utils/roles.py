"""Role resolution from layered name presets."""

import re
from typing import Dict, Iterable, Mapping, Optional, Set

from afterparty.utils.constants import DEFAULT_SPECIAL_ROLES, SPECIAL_ROLES, ParticipantRole

RoleMatchSets = Dict[ParticipantRole, Set[str]]

_PARENTHETICAL_RE = re.compile(r"\([^)]*\)")
_WHITESPACE_RE = re.compile(r"\s+")
_TEAM_PREFIX_RE = re.compile(r"^(?:(?:\d+\s*(?:팀|team)|team\s*\d+)\s*)+", re.IGNORECASE)
_NUMBER_PREFIX_RE = re.compile(r"^\d+\s*")


def normalize_participant_name(raw: str) -> str:
    """
    Normalize a raw name for matching.

    " 2팀 annie (매니저) " -> "annie"
    """
    name = _PARENTHETICAL_RE.sub("", raw)
    name = _WHITESPACE_RE.sub(" ", name).strip()
    name = _TEAM_PREFIX_RE.sub("", name)
    name = _NUMBER_PREFIX_RE.sub("", name)
    return name.strip().lower()


def build_role_match_sets(
        special_roles: Optional[Mapping[str, Iterable[str]]] = None,
        defaults: Mapping[ParticipantRole, Iterable[str]] = DEFAULT_SPECIAL_ROLES
) -> RoleMatchSets:
    """
    Build normalized match sets for the special roles.

    Each role uses the caller's list when the role is present in
    ``special_roles`` and the ``defaults`` list otherwise.
    """
    provided = {ParticipantRole(role): names for role, names in (special_roles or {}).items()}

    match_sets: RoleMatchSets = {}
    for role in SPECIAL_ROLES:
        names = provided[role] if role in provided else defaults.get(role, ())
        match_sets[role] = {normalize_participant_name(name) for name in names}
    return match_sets


def resolve_role(
        name: str,
        angel_set: Set[str],
        role_match_sets: RoleMatchSets
) -> ParticipantRole:
    """
    Resolve a participant role by name.

    Precedence: mentor, manager, angel, supporter, buddy, then attendee.
    """
    normalized = normalize_participant_name(name)

    if normalized in role_match_sets.get(ParticipantRole.MENTOR, ()):
        return ParticipantRole.MENTOR
    if normalized in role_match_sets.get(ParticipantRole.MANAGER, ()):
        return ParticipantRole.MANAGER
    if normalized in angel_set:
        return ParticipantRole.ANGEL
    if normalized in role_match_sets.get(ParticipantRole.SUPPORTER, ()):
        return ParticipantRole.SUPPORTER
    if normalized in role_match_sets.get(ParticipantRole.BUDDY, ()):
        return ParticipantRole.BUDDY

    return ParticipantRole.ATTENDEE


class RoleResolver:
    """Role resolver bound to one roster snapshot."""

    def __init__(
            self,
            angel_names: Iterable[str] = (),
            special_roles: Optional[Mapping[str, Iterable[str]]] = None,
            defaults: Mapping[ParticipantRole, Iterable[str]] = DEFAULT_SPECIAL_ROLES
    ):
        self.angel_set = {normalize_participant_name(name) for name in angel_names}
        self.role_match_sets = build_role_match_sets(special_roles, defaults)

    @classmethod
    def from_roster(cls, roster) -> "RoleResolver":
        """Build a resolver from a RosterPreset."""
        return cls(
            angel_names=roster.angel_names,
            special_roles=roster.special_roles
        )

    def resolve(self, name: str) -> ParticipantRole:
        return resolve_role(name, self.angel_set, self.role_match_sets)
