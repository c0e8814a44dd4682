from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from scoring.constants import AttendanceStatus

DEFAULT_ATTENDANCE_WEIGHTS = {
    AttendanceStatus.PRESENT.value: 1.0,
    AttendanceStatus.LATE.value: 0.5,
    AttendanceStatus.EXCUSED.value: 0.75,
    AttendanceStatus.ABSENT.value: 0.0,
}


@dataclass(frozen=True)
class EngineSettings:
    """Scoring knobs handed to the engine on every call, built from the Flask config."""

    attendance_weights: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_ATTENDANCE_WEIGHTS))
    )
    rate_precision: int = 1
    count_zero_grades: bool = False
    recent_attempts_limit: int = 10

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "EngineSettings":
        weights = dict(DEFAULT_ATTENDANCE_WEIGHTS)
        weights.update(config.get("ATTENDANCE_WEIGHTS") or {})
        return cls(
            attendance_weights=MappingProxyType(weights),
            rate_precision=config.get("ATTENDANCE_RATE_PRECISION", 1),
            count_zero_grades=bool(config.get("COUNT_ZERO_GRADES", False)),
            recent_attempts_limit=config.get("RECENT_ATTEMPTS_LIMIT", 10),
        )

    def weight_for(self, status: str) -> float:
        return self.attendance_weights.get(status, 0.0)
