from typing import Dict, Any, Callable


ConditionFn = Callable[[Dict[str, Any], Dict[str, Any]], bool]


def compare(left, op, right):
    if op == ">=":
        return left >= right
    if op == ">":
        return left > right
    if op == "<=":
        return left <= right
    if op == "<":
        return left < right
    if op == "==":
        return left == right
    if op == "!=":
        return left != right
    raise ValueError(f"Unsupported comparison operator: {op}")


class ConditionRegistry:
    """
    Central registry for episode goals, defeat checks and scene conditions.
    Conditions must be:
      - pure (no side effects)
      - deterministic
      - fast

    A condition is either atomic ({ "type": ... }) or a combinator
    ({ "all": [...] }, { "any": [...] }, { "not": {...} }).
    """

    def __init__(self):
        self._conditions: Dict[str, ConditionFn] = {}

        # register built-ins
        self.register("meter", self._meter)
        self.register("meter_between", self._meter_between)
        self.register("growth_at_cap", self._growth_at_cap)

    # ──────────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────────

    def register(self, name: str, fn: ConditionFn):
        if name in self._conditions:
            raise ValueError(f"Condition already registered: {name}")
        self._conditions[name] = fn

    def evaluate(self, condition: Dict[str, Any], context: Dict[str, Any]) -> bool:
        """
        condition = { "type": "...", ... } or a combinator
        context = { "state": MeterState, ... }
        """
        if "all" in condition:
            return all(self.evaluate(c, context) for c in condition["all"])
        if "any" in condition:
            return any(self.evaluate(c, context) for c in condition["any"])
        if "not" in condition:
            return not self.evaluate(condition["not"], context)

        ctype = condition.get("type")
        if not ctype:
            raise ValueError("Condition missing 'type'")

        if ctype not in self._conditions:
            raise KeyError(f"Unknown condition type: {ctype}")

        return self._conditions[ctype](condition, context)

    def __contains__(self, name: str) -> bool:
        return name in self._conditions

    # ──────────────────────────────────────────────
    # Built-in Conditions
    # ──────────────────────────────────────────────

    def _meter(self, cond, ctx) -> bool:
        """
        cond: { "type": "meter", "meter": "growth", "op": ">=", "value": 20 }
        """
        value = getattr(ctx["state"], cond["meter"])
        return compare(value, cond.get("op", ">="), cond.get("value", 0))

    def _meter_between(self, cond, ctx) -> bool:
        """
        Inclusive on both ends.
        cond: { "type": "meter_between", "meter": "tradition_score", "min": 35, "max": 65 }
        """
        value = getattr(ctx["state"], cond["meter"])
        return cond.get("min", value) <= value <= cond.get("max", value)

    def _growth_at_cap(self, cond, ctx) -> bool:
        state = ctx["state"]
        return state.growth >= state.max_growth
