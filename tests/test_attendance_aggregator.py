import unittest
from datetime import datetime

from scoring.attendance_aggregator import AttendanceAggregator, status_for
from scoring.constants import NOT_MARKED
from scoring.errors import InvalidAttendanceStatus
from scoring.settings import EngineSettings
from tests.support import PROFESSOR_ID, make_session

NOW = datetime(2024, 3, 1, 9, 0, 0)


class AttendanceAggregatorTests(unittest.TestCase):
    def setUp(self):
        self.aggregator = AttendanceAggregator()

    def mark_all(self, sessions, student_id, statuses):
        for session, status in zip(sessions, statuses):
            if status is not None:
                self.aggregator.mark(session, student_id, status, None, PROFESSOR_ID, now=NOW)

    def test_weighted_rate(self):
        sessions = [make_session(i, i) for i in range(1, 11)]
        self.mark_all(sessions, 1, ["PRESENT"] * 6 + ["LATE"] * 2 + ["EXCUSED", "ABSENT"])

        tally = self.aggregator.compute_rate(sessions, 1)
        self.assertEqual(tally.rate, 77.5)
        self.assertEqual((tally.present, tally.late, tally.excused, tally.absent), (6, 2, 1, 1))
        self.assertEqual(tally.total_sessions, 10)

    def test_unmarked_sessions_toggle_denominator(self):
        sessions = [make_session(i, i) for i in range(1, 5)]
        self.mark_all(sessions, 1, ["PRESENT", "PRESENT", None, None])

        with_unmarked = self.aggregator.compute_rate(sessions, 1, include_not_marked=True)
        marked_only = self.aggregator.compute_rate(sessions, 1, include_not_marked=False)
        self.assertEqual(with_unmarked.rate, 50.0)
        self.assertEqual(with_unmarked.not_marked, 2)
        self.assertEqual(marked_only.rate, 100.0)
        self.assertEqual(marked_only.total_sessions, 2)

    def test_no_sessions_is_zero(self):
        self.assertEqual(self.aggregator.compute_rate([], 1).rate, 0.0)

    def test_mark_upserts_existing_record(self):
        session = make_session(1)
        record = self.aggregator.mark(session, 1, "ABSENT", None, PROFESSOR_ID, now=NOW)
        again = self.aggregator.mark(session, 1, "LATE", record, PROFESSOR_ID, notes="bus", now=NOW)

        self.assertIs(again, record)
        self.assertEqual(len(session.records), 1)
        self.assertEqual(record.status, "LATE")
        self.assertEqual(record.notes, "bus")
        self.assertEqual(status_for(session, 1), "LATE")
        self.assertEqual(status_for(session, 2), NOT_MARKED)

    def test_unknown_status_rejected(self):
        with self.assertRaises(InvalidAttendanceStatus):
            self.aggregator.mark(make_session(1), 1, "SICK", None, PROFESSOR_ID)

    def test_custom_weights(self):
        aggregator = AttendanceAggregator(EngineSettings.from_config({"ATTENDANCE_WEIGHTS": {"LATE": 1.0}}))
        sessions = [make_session(1), make_session(2, 1)]
        aggregator.mark(sessions[0], 1, "LATE", None, PROFESSOR_ID)
        aggregator.mark(sessions[1], 1, "EXCUSED", None, PROFESSOR_ID)
        self.assertEqual(aggregator.compute_rate(sessions, 1).rate, 87.5)


class ClassSummaryTests(unittest.TestCase):
    def setUp(self):
        self.aggregator = AttendanceAggregator()
        self.sessions = [make_session(1), make_session(2, 1)]
        mark = self.aggregator.mark
        # student 2: present once, never marked again
        mark(self.sessions[0], 2, "PRESENT", None, PROFESSOR_ID)
        # student 1: present then absent
        mark(self.sessions[0], 1, "PRESENT", None, PROFESSOR_ID)
        mark(self.sessions[1], 1, "ABSENT", None, PROFESSOR_ID)
        # student 3: present both times
        mark(self.sessions[0], 3, "PRESENT", None, PROFESSOR_ID)
        mark(self.sessions[1], 3, "PRESENT", None, PROFESSOR_ID)

    def test_mean_and_pooled_rates_differ(self):
        summary = self.aggregator.class_summary(self.sessions, [1, 2, 3])
        self.assertEqual(summary.mean_rate, 66.7)
        self.assertEqual(summary.pooled_rate, 80.0)
        self.assertEqual(summary.total_present, 4)
        self.assertEqual(summary.total_absent, 1)
        self.assertEqual(summary.total_sessions, 2)

    def test_ranking_breaks_ties_by_student_id(self):
        summary = self.aggregator.class_summary(self.sessions, [2, 3, 1])
        self.assertEqual([t.student_id for t in summary.students], [3, 1, 2])
        self.assertEqual([t.rate for t in summary.students], [100.0, 50.0, 50.0])

    def test_session_breakdown(self):
        counts = AttendanceAggregator.session_breakdown(self.sessions[1])
        self.assertEqual(counts["present"], 1)
        self.assertEqual(counts["absent"], 1)
        self.assertEqual(counts["late"], 0)
        self.assertEqual(counts["total_records"], 2)

    def test_empty_class(self):
        summary = self.aggregator.class_summary(self.sessions, [])
        self.assertEqual(summary.mean_rate, 0.0)
        self.assertEqual(summary.pooled_rate, 0.0)


if __name__ == "__main__":
    unittest.main()
