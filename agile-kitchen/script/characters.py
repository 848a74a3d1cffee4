"""
Character registry.

A character is either sprited (has a name plate and a stage position) or the
narrator (neither). Code that needs a position checks `has_sprite` instead of
testing for None.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, Optional, Union


class Position(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class SpritedCharacter:
    id: str
    display_name: str
    position: Position

    has_sprite = True

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.display_name, "position": self.position.value}


@dataclass(frozen=True)
class Narrator:
    id: str = "narrator"
    display_name: str = ""

    has_sprite = False

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"id": self.id, "name": self.display_name, "position": None}


Character = Union[SpritedCharacter, Narrator]


class CharacterRegistry:
    def __init__(self):
        self._characters: Dict[str, Character] = {}

    def register(self, character: Character) -> None:
        if character.id in self._characters:
            raise ValueError(f"Character already registered: {character.id}")
        self._characters[character.id] = character

    def get(self, character_id: str) -> Character:
        if character_id not in self._characters:
            raise KeyError(f"Unknown character: {character_id}")
        return self._characters[character_id]

    def __contains__(self, character_id: str) -> bool:
        return character_id in self._characters

    def __iter__(self) -> Iterator[Character]:
        return iter(self._characters.values())

    @classmethod
    def from_dict(cls, data: Dict) -> "CharacterRegistry":
        """
        data = { "characters": [ { "id", "name", "position"? }, ... ] }
        An entry without a position is a narrator-style voice.
        """
        reg = cls()
        for entry in data.get("characters", []):
            cid = entry.get("id")
            if not cid:
                raise ValueError("Character entry missing 'id'")
            position = entry.get("position")
            if position:
                reg.register(SpritedCharacter(cid, entry.get("name", cid), Position(position)))
            else:
                reg.register(Narrator(cid, entry.get("name", "")))
        return reg


def default_characters() -> CharacterRegistry:
    reg = CharacterRegistry()
    reg.register(SpritedCharacter("fuji", "Fuji", Position.LEFT))
    reg.register(SpritedCharacter("owner", "Old Master", Position.RIGHT))
    reg.register(SpritedCharacter("mina", "Mina", Position.CENTER))
    reg.register(Narrator())
    return reg


def load_characters(path: Optional[Path]) -> CharacterRegistry:
    if path is None or not Path(path).exists():
        return default_characters()
    with open(path, "r", encoding="utf-8") as f:
        return CharacterRegistry.from_dict(json.load(f))
