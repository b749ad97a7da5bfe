"""Medical declaration parsing shared by the PDF renderer and the boards."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, List, Tuple

# (flag, English label fragment, Malay label fragment)
CONDITIONS: Tuple[Tuple[str, str, str], ...] = (
    ("asthma", "Asthma", "Asma"),
    ("brain_injury", "Brain", "Otak"),
    ("chest_surgery", "Chest Surgery", "Pembedahan Dada"),
    ("bronchitis", "Chronic Bronchitis", "Bronkitis"),
    ("epilepsy", "Epilepsy", "Epilepsi"),
    ("heart_disease", "Heart disease", "Jantung"),
    ("injury_or_surgery", "Injury or Surgery", "Kecederaan"),
    ("pregnant", "Pregnant", "Mengandung"),
)

# Looser fragments used to decide whether an entry is a standard condition.
_STANDARD_FRAGMENTS = (
    "Asthma", "Asma", "Brain", "Otak", "Chest Surgery", "Pembedahan Dada",
    "Bronchitis", "Bronkitis", "Epilepsy", "Epilepsi", "Heart", "Jantung",
    "Injury", "Kecederaan", "Pregnant", "Mengandung",
)


@dataclass
class HealthFlags:
    asthma: bool = False
    brain_injury: bool = False
    chest_surgery: bool = False
    bronchitis: bool = False
    epilepsy: bool = False
    heart_disease: bool = False
    injury_or_surgery: bool = False
    pregnant: bool = False
    other: List[str] = field(default_factory=list)
    none_declared: bool = True

    @property
    def has_condition(self) -> bool:
        return not self.none_declared


def parse_health_declaration(value: Any) -> List[str]:
    """
    Accepts what ends up in participants.health_declaration: a JSON list or
    object, a comma-joined answer string, or already-structured data.
    """
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        try:
            value = json.loads(text)
        except ValueError:
            return [part.strip() for part in text.split(",") if part.strip()]
    if isinstance(value, dict):
        value = [v for v in value.values() if v]
    if isinstance(value, (list, tuple)):
        return [str(v).strip() for v in value if v and str(v).strip()]
    return [str(value)]


def health_flags(items: List[str]) -> HealthFlags:
    flags = HealthFlags(none_declared=not items)
    for name, english, malay in CONDITIONS:
        setattr(flags, name, any(english in item or malay in item for item in items))
    flags.other = [item for item in items if not any(std in item for std in _STANDARD_FRAGMENTS)]
    return flags
