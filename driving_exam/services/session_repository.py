"""
Exam Session Repository

Persistence of exam sessions, their frozen question sets and answer records.
The engine talks to the ORM only through this module and the content catalog.

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Avg, Count, Max, QuerySet

from ..exams.models import (
    COMPLETED_STATUSES,
    ExamAnswer,
    ExamSession,
    ExamStatus,
    OPEN_STATUSES,
    SessionQuestion,
)
from ..exceptions import QuestionNotInSession, SessionNotFound
from .result_aggregator import SessionResult

logger = logging.getLogger(__name__)


class ExamSessionRepository:
    """ORM-backed storage for exam sessions."""

    # --- Creation ---

    @transaction.atomic
    def create(self, questions: List[Dict[str, Any]], **session_fields) -> ExamSession:
        """
        Persist a session together with its frozen question snapshot.

        Args:
            questions: Catalog question dictionaries in session order
            **session_fields: ExamSession field values

        Returns:
            The saved ExamSession
        """
        session = ExamSession.objects.create(total_questions=len(questions), **session_fields)
        SessionQuestion.objects.bulk_create(
            [
                SessionQuestion(
                    session=session,
                    question_id=question["id"],
                    order=position,
                    correct_option_index=question["correct_option_index"],
                    snapshot={
                        "text": question["text"],
                        "explanation": question.get("explanation"),
                        "image_url": question.get("image_url"),
                        "options": question.get("options", []),
                    },
                )
                for position, question in enumerate(questions, start=1)
            ]
        )
        return session

    # --- Lookups ---

    def get_for_user(self, session_id: int, user) -> ExamSession:
        session = (
            ExamSession.objects.select_related("package", "ticket", "topic")
            .filter(pk=session_id, user=user)
            .first()
        )
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def lock_for_user(self, session_id: int, user) -> ExamSession:
        """Load a session with a row lock. Must run inside a transaction."""
        session = (
            ExamSession.objects.select_for_update()
            .filter(pk=session_id, user=user)
            .first()
        )
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def session_questions(self, session: ExamSession) -> List[SessionQuestion]:
        return list(session.session_questions.order_by("order"))

    def find_session_question(self, session: ExamSession, question_id: int) -> SessionQuestion:
        entry = session.session_questions.filter(question_id=question_id).first()
        if entry is None:
            raise QuestionNotInSession(session.pk, question_id)
        return entry

    def answers(self, session: ExamSession) -> List[ExamAnswer]:
        return list(session.answers.all())

    def answers_by_question(self, session: ExamSession) -> Dict[int, ExamAnswer]:
        return {answer.question_id: answer for answer in self.answers(session)}

    def active_session(self, user) -> Optional[ExamSession]:
        return (
            ExamSession.objects.select_related("package", "ticket", "topic")
            .filter(user=user, status__in=OPEN_STATUSES)
            .order_by("-started_at", "-id")
            .first()
        )

    def history(
        self,
        user,
        status: Optional[str] = None,
        mode: Optional[str] = None,
        package_id: Optional[int] = None,
    ) -> QuerySet:
        queryset = ExamSession.objects.select_related("package", "ticket", "topic").filter(user=user)
        if status:
            queryset = queryset.filter(status=status)
        if mode:
            queryset = queryset.filter(mode=mode)
        if package_id:
            queryset = queryset.filter(package_id=package_id)
        return queryset.order_by("-started_at", "-id")

    def completed(self, user, **filters) -> List[ExamSession]:
        """
        Closed (FINISHED or EXPIRED) sessions of ``user``, oldest first.

        Args:
            **filters: Extra field lookups such as ``package_id=3`` or
                ``mode=ExamMode.MARATHON``
        """
        return list(
            ExamSession.objects.filter(user=user, status__in=COMPLETED_STATUSES, **filters)
            .order_by("finished_at")
        )

    def leaderboard(self, topic_id: Optional[int] = None, limit: int = 10) -> List[Dict[str, Any]]:
        """
        Best users by closed sessions, optionally restricted to one topic.

        Rows are ordered by best percentage, then average percentage, then
        number of closed sessions.
        """
        username_field = f"user__{get_user_model().USERNAME_FIELD}"
        queryset = ExamSession.objects.filter(status__in=COMPLETED_STATUSES)
        if topic_id is not None:
            queryset = queryset.filter(topic_id=topic_id)
        rows = (
            queryset.values("user_id", username_field)
            .annotate(
                best_score=Max("percentage"),
                average_score=Avg("percentage"),
                total_exams=Count("id"),
            )
            .order_by("-best_score", "-average_score", "-total_exams", "user_id")[:limit]
        )
        return [
            {
                "user_id": row["user_id"],
                "user_name": str(row[username_field]),
                "best_score": row["best_score"] or 0.0,
                "average_score": row["average_score"] or 0.0,
                "total_exams": row["total_exams"],
            }
            for row in rows
        ]

    def stale_sessions(self, cutoff: datetime) -> QuerySet:
        return ExamSession.objects.filter(status__in=OPEN_STATUSES, expires_at__lt=cutoff)

    # --- Mutations ---

    def upsert_answer(
        self,
        session: ExamSession,
        question_id: int,
        selected_option_index: Optional[int],
        time_spent_seconds: int,
        is_correct: bool,
        answered_at: datetime,
    ) -> ExamAnswer:
        answer, created = ExamAnswer.objects.update_or_create(
            session=session,
            question_id=question_id,
            defaults={
                "selected_option_index": selected_option_index,
                "time_spent_seconds": time_spent_seconds,
                "is_correct": is_correct,
                "answered_at": answered_at,
            },
        )
        if not created:
            logger.debug(f"Overwrote answer for question {question_id} in session {session.pk}")
        return answer

    def mark_in_progress(self, session: ExamSession) -> None:
        session.status = ExamStatus.IN_PROGRESS
        session.save(update_fields=["status", "updated_at"])

    def close(
        self,
        session: ExamSession,
        status: str,
        finished_at: datetime,
        result: Optional[SessionResult] = None,
    ) -> ExamSession:
        session.status = status
        session.finished_at = finished_at
        update_fields = ["status", "finished_at", "updated_at"]
        if result is not None:
            session.answered_count = result.answered_count
            session.correct_count = result.correct_count
            session.incorrect_count = result.incorrect_count
            session.unanswered_count = result.unanswered_count
            session.score = result.score
            session.percentage = result.percentage
            session.is_passed = result.is_passed
            session.duration_seconds = result.duration_seconds
            update_fields += [
                "answered_count",
                "correct_count",
                "incorrect_count",
                "unanswered_count",
                "score",
                "percentage",
                "is_passed",
                "duration_seconds",
            ]
        session.save(update_fields=update_fields)
        return session

    def abandon_many(self, queryset: QuerySet, now: datetime) -> int:
        return queryset.update(status=ExamStatus.ABANDONED, finished_at=now, updated_at=now)
