from __future__ import annotations

from typing import Any, Dict, List, Optional
from ui.provider import UIProvider


class CLIProvider(UIProvider):
    def scene(self, text: str, data: Optional[Dict[str, Any]] = None) -> None:
        print()
        print(text)
        print()

    def dialogue(self, speaker: str, text: str, data: Optional[Dict[str, Any]] = None) -> None:
        if speaker:
            print(f"{speaker}: {text}")
        else:
            print(f"  {text}")

    def meters(self, snapshot: Dict[str, Any], data: Optional[Dict[str, Any]] = None) -> None:
        print(
            f"[Day {snapshot.get('day')}] "
            f"Growth {snapshot.get('growth')}/{snapshot.get('max_growth')}  "
            f"Stagnation {snapshot.get('stagnation')}  "
            f"Mood {snapshot.get('old_man_mood')}  "
            f"Quality {snapshot.get('ingredient_quality')}  "
            f"Ingredients {snapshot.get('current_ingredients')}  "
            f"Tradition {snapshot.get('tradition_score')}"
        )

    def system(self, text: str, data: Optional[Dict[str, Any]] = None) -> None:
        print(text)

    def error(self, text: str, data: Optional[Dict[str, Any]] = None) -> None:
        print(f"[ERROR] {text}")

    def choice(self, prompt: str, options: List[str], data: Optional[Dict[str, Any]] = None) -> int:
        print()
        if prompt:
            print(prompt)
        for i, opt in enumerate(options, start=1):
            print(f"{i}. {opt}")

        while True:
            raw = input("> ").strip()
            try:
                sel = int(raw)
                if 1 <= sel <= len(options):
                    return sel - 1
            except ValueError:
                pass
            self.error(f"Enter a number from 1 to {len(options)}.")

    def text_input(self, prompt: str, data: Optional[Dict[str, Any]] = None) -> str:
        return input(f"{prompt} ").strip()
