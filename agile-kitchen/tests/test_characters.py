import json
import sys
import tempfile
from pathlib import Path
import unittest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from script.characters import (  # noqa: E402
    CharacterRegistry,
    Narrator,
    Position,
    SpritedCharacter,
    default_characters,
    load_characters,
)


class TestCharacterRegistry(unittest.TestCase):
    def test_defaults(self):
        reg = default_characters()
        self.assertEqual(reg.get("fuji").position, Position.LEFT)
        self.assertEqual(reg.get("owner").display_name, "Old Master")
        self.assertFalse(reg.get("narrator").has_sprite)
        self.assertTrue(reg.get("mina").has_sprite)

    def test_unknown_and_duplicate(self):
        reg = CharacterRegistry()
        reg.register(Narrator())
        with self.assertRaises(ValueError):
            reg.register(Narrator())
        with self.assertRaises(KeyError):
            reg.get("ghost")
        self.assertNotIn("ghost", reg)

    def test_from_dict_without_position_is_narrator(self):
        reg = CharacterRegistry.from_dict({"characters": [
            {"id": "cat", "name": "Cat", "position": "right"},
            {"id": "voice", "name": "A voice"},
        ]})
        self.assertIsInstance(reg.get("cat"), SpritedCharacter)
        self.assertIsInstance(reg.get("voice"), Narrator)
        self.assertIsNone(reg.get("voice").to_dict()["position"])
        self.assertEqual([c.id for c in reg], ["cat", "voice"])

    def test_load_characters_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "characters.json"
            path.write_text(json.dumps({"characters": [{"id": "fuji", "name": "Fuji", "position": "left"}]}), encoding="utf-8")
            reg = load_characters(path)
            self.assertIn("fuji", reg)
            self.assertNotIn("mina", reg)
        self.assertIn("mina", load_characters(None))

    def test_shipped_characters_match_defaults(self):
        shipped = load_characters(ROOT / "game-data" / "characters.json")
        self.assertEqual({c.id for c in shipped}, {c.id for c in default_characters()})


if __name__ == "__main__":
    unittest.main()
