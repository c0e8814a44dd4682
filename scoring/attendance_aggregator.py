import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from models.attendance import AttendanceRecord
from scoring.constants import NOT_MARKED, AttendanceStatus
from scoring.errors import InvalidAttendanceStatus
from scoring.settings import EngineSettings

logger = logging.getLogger(__name__)

VALID_STATUSES = {status.value for status in AttendanceStatus}


@dataclass
class AttendanceTally:
    student_id: Optional[int] = None
    present: int = 0
    absent: int = 0
    late: int = 0
    excused: int = 0
    not_marked: int = 0
    total_sessions: int = 0
    rate: float = 0.0

    @property
    def marked(self):
        return self.present + self.absent + self.late + self.excused

    def to_dict(self):
        return asdict(self)


@dataclass
class ClassAttendance:
    students: List[AttendanceTally] = field(default_factory=list)
    total_sessions: int = 0
    total_present: int = 0
    total_absent: int = 0
    total_late: int = 0
    total_excused: int = 0
    mean_rate: float = 0.0
    pooled_rate: float = 0.0


class AttendanceAggregator:
    """Weighted attendance rates over a set of sessions.

    Each session is expected to expose ``records`` holding at most one row
    per student.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()

    def mark(self, session, student_id, status, existing, marker_id, notes=None,
             now: Optional[datetime] = None) -> AttendanceRecord:
        status = getattr(status, "value", status)
        if status not in VALID_STATUSES:
            raise InvalidAttendanceStatus(status)
        now = now or datetime.utcnow()

        if existing is not None:
            existing.status = status
            existing.notes = notes
            existing.marked_at = now
            return existing

        record = AttendanceRecord(
            session_id=session.id,
            student_id=student_id,
            status=status,
            notes=notes,
            marked_by=marker_id,
            marked_at=now,
        )
        session.records.append(record)
        logger.debug("Marked student %s %s in session %s", student_id, status, session.id)
        return record

    def weighted_sum(self, present=0, late=0, excused=0, absent=0):
        weight = self.settings.weight_for
        return (present * weight(AttendanceStatus.PRESENT.value)
                + late * weight(AttendanceStatus.LATE.value)
                + excused * weight(AttendanceStatus.EXCUSED.value)
                + absent * weight(AttendanceStatus.ABSENT.value))

    def rate_of(self, weighted, denominator):
        if denominator <= 0:
            return 0.0
        return round(weighted / denominator * 100, self.settings.rate_precision)

    def compute_rate(self, sessions: Iterable, student_id, include_not_marked: bool = True) -> AttendanceTally:
        """Classify every session for one student and compute the weighted rate.

        With ``include_not_marked`` unmarked sessions count in the
        denominator; without it only marked sessions do.
        """
        tally = AttendanceTally(student_id=student_id)
        for session in sessions:
            record = record_for(session, student_id)
            if record is None:
                tally.not_marked += 1
            elif record.status == AttendanceStatus.PRESENT.value:
                tally.present += 1
            elif record.status == AttendanceStatus.LATE.value:
                tally.late += 1
            elif record.status == AttendanceStatus.EXCUSED.value:
                tally.excused += 1
            elif record.status == AttendanceStatus.ABSENT.value:
                tally.absent += 1
            else:
                tally.not_marked += 1

        tally.total_sessions = tally.marked + tally.not_marked if include_not_marked else tally.marked
        weighted = self.weighted_sum(tally.present, tally.late, tally.excused, tally.absent)
        tally.rate = self.rate_of(weighted, tally.total_sessions)
        return tally

    def class_summary(self, sessions, student_ids, include_not_marked: bool = True) -> ClassAttendance:
        sessions = list(sessions)
        tallies = [self.compute_rate(sessions, student_id, include_not_marked) for student_id in student_ids]

        summary = ClassAttendance(students=rank(tallies), total_sessions=len(sessions))
        for tally in tallies:
            summary.total_present += tally.present
            summary.total_absent += tally.absent
            summary.total_late += tally.late
            summary.total_excused += tally.excused

        if tallies:
            summary.mean_rate = round(sum(t.rate for t in tallies) / len(tallies), self.settings.rate_precision)

        total_records = summary.total_present + summary.total_absent + summary.total_late + summary.total_excused
        pooled = self.weighted_sum(summary.total_present, summary.total_late,
                                   summary.total_excused, summary.total_absent)
        summary.pooled_rate = self.rate_of(pooled, total_records)
        return summary

    @staticmethod
    def session_breakdown(session):
        counts = {status.value.lower(): 0 for status in AttendanceStatus}
        for record in session.records:
            key = str(record.status).lower()
            if key in counts:
                counts[key] += 1
        counts["total_records"] = len(session.records)
        return counts


def rank(tallies):
    """Highest rate first; equal rates fall back to ascending student id."""
    return sorted(tallies, key=lambda tally: (-tally.rate, tally.student_id))


def record_for(session, student_id):
    for record in session.records:
        if record.student_id == student_id:
            return record
    return None


def status_for(session, student_id):
    record = record_for(session, student_id)
    return record.status if record is not None else NOT_MARKED
