"""Recurring shift expansion - occurrence counts and strides come from config/recurrence_rules.yaml.

A template dated D with pattern p expands to rules[p].occurrences payloads dated
D, D + stride, D + 2 * stride, ... Every other template field is copied unchanged.
"""
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from app.config import settings, BASE_DIR

# Fields that only steer expansion and are not stored on the generated shifts
EXPANSION_ONLY_FIELDS = ("is_recurring", "recurring_pattern")


def _rules_path() -> Path:
    p = settings.recurrence_rules_path
    return p if p.is_absolute() else BASE_DIR / p


def _load_rules_from_yaml(path: Optional[Path] = None) -> dict:
    """Default rules: config/recurrence_rules.yaml."""
    with open(path or _rules_path(), "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_pattern_rule(pattern: str, rules: Optional[Dict[str, Any]] = None) -> tuple[int, int]:
    """(occurrences, stride_days) for a pattern; unknown patterns raise ValueError."""
    rules = rules if rules is not None else _load_rules_from_yaml()
    patterns = rules.get("patterns", {})
    key = getattr(pattern, "value", pattern)
    if key not in patterns:
        raise ValueError(f"unknown recurring pattern: {key}")
    rule = patterns[key]
    occurrences = int(rule["occurrences"])
    stride = int(rule["stride_days"])
    if occurrences < 1 or stride < 1:
        raise ValueError(f"recurrence rule for {key} must have occurrences >= 1 and stride_days >= 1")
    return occurrences, stride


def expand_recurring_shift(template: Dict[str, Any], rules: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """
    Turn one shift template into concrete shift-creation payloads.

    template needs shift_date; is_recurring / recurring_pattern decide the expansion.
    A non-recurring template yields exactly one payload.
    """
    base = {k: v for k, v in template.items() if k not in EXPANSION_ONLY_FIELDS}
    start: date = template["shift_date"]
    if not template.get("is_recurring"):
        return [dict(base)]

    occurrences, stride = get_pattern_rule(template.get("recurring_pattern") or "weekly", rules)
    payloads = []
    for i in range(occurrences):
        payload = dict(base)
        payload["shift_date"] = start + timedelta(days=i * stride)
        payloads.append(payload)
    return payloads
