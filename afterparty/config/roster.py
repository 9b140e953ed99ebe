"""Roster snapshot (team -> members, angels, special roles) consumed for role resolution."""

from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def _unique_names(names: List[str]) -> List[str]:
    seen = set()
    result = []
    for raw in names:
        name = raw.strip()
        if not name or name in seen:
            continue
        seen.add(name)
        result.append(name)
    return result


class TeamGroup(BaseModel):
    """One team with its angel and members."""

    team_name: str
    angel: str
    members: List[str] = Field(default_factory=list)

    @field_validator("team_name", "angel")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("members")
    @classmethod
    def dedupe_members(cls, value: List[str]) -> List[str]:
        return _unique_names(value)


class RosterPreset(BaseModel):
    """Read-only roster snapshot passed in by the caller."""

    team_groups: List[TeamGroup] = Field(default_factory=list)
    fixed_angels: List[str] = Field(default_factory=list)
    # Only roles present here override the built-in presets
    special_roles: Dict[str, List[str]] = Field(default_factory=dict)

    @field_validator("fixed_angels")
    @classmethod
    def dedupe_angels(cls, value: List[str]) -> List[str]:
        return _unique_names(value)

    @field_validator("special_roles")
    @classmethod
    def dedupe_special_roles(cls, value: Dict[str, List[str]]) -> Dict[str, List[str]]:
        return {role: _unique_names(names) for role, names in value.items()}

    @property
    def angel_names(self) -> List[str]:
        """Fixed angels plus every team's angel."""
        names = list(self.fixed_angels)
        names.extend(group.angel for group in self.team_groups if group.angel)
        return _unique_names(names)


def load_roster(path: Optional[str]) -> RosterPreset:
    """
    Load a roster snapshot from a JSON file.

    Args:
        path: File path, or None for an empty roster

    Returns:
        Parsed roster (empty when no path is configured)
    """
    if not path:
        return RosterPreset()

    return RosterPreset.model_validate_json(Path(path).read_text(encoding="utf-8"))
