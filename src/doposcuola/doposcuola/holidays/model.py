from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Holiday:
    holiday_id: int
    holiday_date: date
    reason: str

    def to_dict(self) -> dict:
        return {"id": self.holiday_id, "date": self.holiday_date.isoformat(), "reason": self.reason}
