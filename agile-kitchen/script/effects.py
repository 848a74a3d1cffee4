from typing import Dict, Any, Callable


EffectFn = Callable[[Dict[str, Any], Dict[str, Any]], None]

# Story flags a scene may set on MeterState.
STORY_FLAGS = {"hybrid_moment_triggered", "has_chef_knife", "intro_complete", "player_choice"}


class EffectRegistry:
    """
    Executes effects attached to scenes and choice options.

    Effects are commands, not logic.
    They may:
      - adjust or set a meter (clamped by MeterState)
      - set a story flag
    """

    def __init__(self):
        self._effects: Dict[str, EffectFn] = {}

        # register built-ins
        self.register("adjust_meter", self._adjust_meter)
        self.register("set_meter", self._set_meter)
        self.register("set_flag", self._set_flag)

    # ──────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────

    def register(self, name: str, fn: EffectFn):
        if name in self._effects:
            raise ValueError(f"Effect already registered: {name}")
        self._effects[name] = fn

    def execute(self, effect: Dict[str, Any], context: Dict[str, Any]):
        """
        effect = { "type": "...", ... }
        context = { "state": MeterState, "emit": callable, "scene_id": str }
        """
        etype = effect.get("type")
        if not etype:
            raise ValueError("Effect missing 'type'")

        if etype not in self._effects:
            raise KeyError(f"Unknown effect type: {etype}")

        self._effects[etype](effect, context)

    def __contains__(self, name: str) -> bool:
        return name in self._effects

    # ──────────────────────────────────────────────
    # Built-in Effects
    # ──────────────────────────────────────────────

    def _adjust_meter(self, effect, ctx):
        """
        effect:
          { "type": "adjust_meter", "meter": "old_man_mood", "amount": 15 }
        """
        meter = effect.get("meter")
        if not meter:
            return
        ctx["state"].adjust(meter, effect.get("amount", 0))

    def _set_meter(self, effect, ctx):
        """
        effect:
          { "type": "set_meter", "meter": "growth", "value": 5 }
        """
        meter = effect.get("meter")
        if not meter:
            return
        state = ctx["state"]
        current = getattr(state, meter)
        state.adjust(meter, int(effect.get("value", 0)) - current)

    def _set_flag(self, effect, ctx):
        """
        effect:
          { "type": "set_flag", "flag": "player_choice", "value": "agile" }
        """
        flag = effect.get("flag")
        if not flag:
            return
        if flag not in STORY_FLAGS:
            raise KeyError(f"Unknown story flag: {flag}")
        setattr(ctx["state"], flag, effect.get("value", True))
