from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from ..core.constants import FALLBACK_LANGUAGE


@dataclass(frozen=True)
class SubjectDef:
    """Catalogue entry: one bookable subject with per-language names."""

    subject_id: str
    translations: Dict[str, str] = field(default_factory=dict)
    icon: str = "📚"
    color: str = "bg-gray-100 text-gray-800"
    active: bool = True

    def display_name(self, language: str) -> str:
        return self.translations.get(language) or self.translations.get(FALLBACK_LANGUAGE) or self.subject_id

    def to_dict(self) -> dict:
        return {
            "id": self.subject_id,
            "translations": dict(self.translations),
            "icon": self.icon,
            "color": self.color,
            "active": self.active,
        }
