"""
Package-level rollup of a user's completed sessions.

``aggregate_package_statistics`` is pure: it reads the stored result fields of
already closed sessions (FINISHED or EXPIRED) and never divides by zero.
With no completed sessions every counter is 0, ``progress_percentage`` and
``success_rate`` are 0.0, and every average, extreme and date is None.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from ..exams.models import COMPLETED_STATUSES


@dataclass(frozen=True)
class PackageStatistics:
    total_tests_in_package: int
    completed_tests: int = 0
    passed_tests: int = 0
    failed_tests: int = 0
    total_correct_answers: int = 0
    total_incorrect_answers: int = 0
    total_unanswered_questions: int = 0
    average_percentage: Optional[float] = None
    best_percentage: Optional[float] = None
    worst_percentage: Optional[float] = None
    average_test_duration: Optional[float] = None
    first_test_date: Optional[datetime] = None
    last_test_date: Optional[datetime] = None
    progress_percentage: float = 0.0
    success_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def aggregate_package_statistics(sessions: Iterable[Any], total_tests_in_package: int) -> PackageStatistics:
    """
    Fold closed sessions of one (user, package) pair into package statistics.

    Args:
        sessions: ExamSession-like objects; anything not FINISHED or EXPIRED
            is ignored
        total_tests_in_package: Denominator of ``progress_percentage``

    Returns:
        PackageStatistics
    """
    completed = [session for session in sessions if session.status in COMPLETED_STATUSES]
    if not completed:
        return PackageStatistics(total_tests_in_package=total_tests_in_package)

    count = len(completed)
    passed = sum(1 for session in completed if session.is_passed)
    percentages = [session.percentage or 0.0 for session in completed]
    finished_dates = [session.finished_at for session in completed if session.finished_at]
    correct = sum(session.correct_count or 0 for session in completed)
    answered = sum(session.answered_count or 0 for session in completed)
    total = sum(session.total_questions or 0 for session in completed)

    return PackageStatistics(
        total_tests_in_package=total_tests_in_package,
        completed_tests=count,
        passed_tests=passed,
        failed_tests=count - passed,
        total_correct_answers=correct,
        total_incorrect_answers=answered - correct,
        total_unanswered_questions=total - answered,
        average_percentage=sum(percentages) / count,
        best_percentage=max(percentages),
        worst_percentage=min(percentages),
        average_test_duration=sum(session.duration_seconds or 0 for session in completed) / count,
        first_test_date=min(finished_dates) if finished_dates else None,
        last_test_date=max(finished_dates) if finished_dates else None,
        progress_percentage=(100.0 * count / total_tests_in_package) if total_tests_in_package else 0.0,
        success_rate=100.0 * passed / count,
    )
