"""
Answer grading and the session state machine.

Grading compares the submitted index with the frozen question's correct index.
A missing selection is recorded as unanswered and is never correct.

State machine::

    STARTED --first answer--> IN_PROGRESS
    STARTED | IN_PROGRESS --finish--> FINISHED
    STARTED | IN_PROGRESS --deadline passed--> EXPIRED
    STARTED | IN_PROGRESS --abandon / cleanup--> ABANDONED

FINISHED, EXPIRED and ABANDONED are terminal.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from ..exams.models import ExamStatus, OPEN_STATUSES, SessionQuestion
from ..exceptions import InvalidExamRequest, SessionClosed

logger = logging.getLogger(__name__)

_TRANSITIONS = {
    ExamStatus.STARTED: {
        ExamStatus.IN_PROGRESS,
        ExamStatus.FINISHED,
        ExamStatus.EXPIRED,
        ExamStatus.ABANDONED,
    },
    ExamStatus.IN_PROGRESS: {
        ExamStatus.FINISHED,
        ExamStatus.EXPIRED,
        ExamStatus.ABANDONED,
    },
}


@dataclass(frozen=True)
class CheckAnswer:
    question_id: int
    is_correct: bool
    correct_option_index: int
    explanation: Optional[Dict[str, Optional[str]]]


def can_transition(current: str, target: str) -> bool:
    return target in _TRANSITIONS.get(current, set())


def ensure_transition(session, target: str) -> None:
    """Raise SessionClosed unless ``session`` may move to ``target``."""
    if not can_transition(session.status, target):
        raise SessionClosed(session.pk, session.status)


def ensure_open(session) -> None:
    if session.status not in OPEN_STATUSES:
        raise SessionClosed(session.pk, session.status)


def validate_submission(
    entry: SessionQuestion, selected_option_index: Optional[int], time_spent_seconds: int
) -> None:
    if time_spent_seconds is None or time_spent_seconds < 0:
        raise InvalidExamRequest(
            "Time spent must be zero or a positive number of seconds",
            field="time_spent_seconds",
            value=time_spent_seconds,
        )
    if selected_option_index is None:
        return
    if not 0 <= selected_option_index < entry.option_count:
        raise InvalidExamRequest(
            "Selected option does not exist on this question",
            field="selected_option_index",
            value=selected_option_index,
            option_count=entry.option_count,
        )


def grade(entry: SessionQuestion, selected_option_index: Optional[int]) -> bool:
    if selected_option_index is None:
        return False
    return selected_option_index == entry.correct_option_index


def evaluate(
    entry: SessionQuestion, selected_option_index: Optional[int], time_spent_seconds: int
) -> CheckAnswer:
    """
    Validate and grade one submission against a frozen question.

    The returned CheckAnswer always discloses the correct index and the
    explanation; visibility gating applies to the session payload only.

    Raises:
        InvalidExamRequest: Negative time or an option index out of range
    """
    validate_submission(entry, selected_option_index, time_spent_seconds)
    is_correct = grade(entry, selected_option_index)
    logger.debug(
        f"Graded question {entry.question_id} in session {entry.session_id}: "
        f"selected={selected_option_index} correct={entry.correct_option_index} -> {is_correct}"
    )
    return CheckAnswer(
        question_id=entry.question_id,
        is_correct=is_correct,
        correct_option_index=entry.correct_option_index,
        explanation=entry.snapshot.get("explanation"),
    )
