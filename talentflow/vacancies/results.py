from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class VacancySnapshot:
    """Vacancy, its stages in template order and linked holidays, dates as YYYY-MM-DD."""
    vacancy: Dict[str, Any]
    stages: List[Dict[str, Any]] = field(default_factory=list)
    holidays: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def current_stage(self):
        return next((stage for stage in self.stages if stage["state"] == "open"), None)

    def to_dict(self) -> dict:
        """Serialize for JSON response"""
        return {
            "vacancy": self.vacancy,
            "stages": self.stages,
            "holidays": self.holidays,
        }
