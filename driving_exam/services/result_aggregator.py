"""
Result Aggregator

Pure scoring arithmetic over one session: counts, percentage, pass/fail,
duration, per-answer details and the extended statistics view. Nothing here
touches the database or the cache; callers hand in already loaded rows.

Zero-denominator policy:
- ``percentage``, ``correct_percentage`` and ``unanswered_percentage`` are
  0.0 for a session without questions
- ``average_time_per_question`` is None when nothing was answered
- ``fastest_answer_time`` / ``slowest_answer_time`` are None when nothing
  was answered

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol


class AnswerLike(Protocol):
    question_id: int
    selected_option_index: Optional[int]
    is_correct: Optional[bool]
    time_spent_seconds: int


@dataclass(frozen=True)
class SessionResult:
    total_questions: int
    answered_count: int
    correct_count: int
    incorrect_count: int
    unanswered_count: int
    score: int
    percentage: float
    is_passed: bool
    passing_score: int
    duration_seconds: int
    average_time_per_question: Optional[float]


@dataclass(frozen=True)
class SessionStatistics:
    result: SessionResult
    fastest_answer_time: Optional[int]
    slowest_answer_time: Optional[int]
    correct_percentage: float
    unanswered_percentage: float


@dataclass(frozen=True)
class AnswerDetail:
    question_id: int
    question_order: int
    question_text: Dict[str, Optional[str]]
    image_url: Optional[str]
    options: List[Dict[str, Any]] = field(default_factory=list)
    selected_option_index: Optional[int] = None
    correct_option_index: Optional[int] = None
    is_correct: bool = False
    explanation: Optional[Dict[str, Optional[str]]] = None
    time_spent_seconds: Optional[int] = None


def _percent(part: int, whole: int) -> float:
    return 100.0 * part / whole if whole else 0.0


def elapsed_seconds(started_at: datetime, finished_at: Optional[datetime]) -> int:
    if finished_at is None:
        return 0
    return max(0, int((finished_at - started_at).total_seconds()))


def average_time(duration_seconds: int, answered_count: int) -> Optional[float]:
    if not answered_count:
        return None
    return duration_seconds / answered_count


def compute_result(
    total_questions: int,
    answers: Iterable[AnswerLike],
    passing_score: int,
    started_at: datetime,
    finished_at: Optional[datetime],
) -> SessionResult:
    """
    Score a session from its answer records.

    Args:
        total_questions: Size of the session's frozen question set
        answers: One record per answered (or skipped) question
        passing_score: Minimum percentage needed to pass
        started_at: Session start
        finished_at: Session end; None counts as zero duration

    Returns:
        SessionResult with all counters and derived values
    """
    answers = list(answers)
    answered_count = sum(1 for answer in answers if answer.selected_option_index is not None)
    correct_count = sum(1 for answer in answers if answer.is_correct is True)
    percentage = _percent(correct_count, total_questions)
    duration_seconds = elapsed_seconds(started_at, finished_at)

    return SessionResult(
        total_questions=total_questions,
        answered_count=answered_count,
        correct_count=correct_count,
        incorrect_count=answered_count - correct_count,
        unanswered_count=total_questions - answered_count,
        score=correct_count,
        percentage=percentage,
        is_passed=percentage >= passing_score,
        passing_score=passing_score,
        duration_seconds=duration_seconds,
        average_time_per_question=average_time(duration_seconds, answered_count),
    )


def compute_statistics(result: SessionResult, answers: Iterable[AnswerLike]) -> SessionStatistics:
    answered_times = [
        answer.time_spent_seconds
        for answer in answers
        if answer.selected_option_index is not None and answer.time_spent_seconds is not None
    ]
    return SessionStatistics(
        result=result,
        fastest_answer_time=min(answered_times) if answered_times else None,
        slowest_answer_time=max(answered_times) if answered_times else None,
        correct_percentage=_percent(result.correct_count, result.total_questions),
        unanswered_percentage=_percent(result.unanswered_count, result.total_questions),
    )


def build_answer_details(
    session_questions: Iterable[Any],
    answers_by_question: Mapping[int, AnswerLike],
) -> List[AnswerDetail]:
    """
    One detail row per frozen question, in session order.

    Questions without a record show up with no selection and ``is_correct``
    False.
    """
    details = []
    for entry in session_questions:
        answer = answers_by_question.get(entry.question_id)
        details.append(
            AnswerDetail(
                question_id=entry.question_id,
                question_order=entry.order,
                question_text=entry.snapshot.get("text") or {},
                image_url=entry.snapshot.get("image_url"),
                options=list(entry.snapshot.get("options", [])),
                selected_option_index=answer.selected_option_index if answer else None,
                correct_option_index=entry.correct_option_index,
                is_correct=bool(answer and answer.is_correct),
                explanation=entry.snapshot.get("explanation"),
                time_spent_seconds=answer.time_spent_seconds if answer else None,
            )
        )
    return details
