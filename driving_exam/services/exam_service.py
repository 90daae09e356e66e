"""
Exam Service

Transport-agnostic operations of the exam engine. Views call these methods
and only map the returned objects to JSON.

Operations:
- start_exam / get_session / get_active_session
- submit_answer / submit_all / finish_exam / abandon_exam
- get_result / get_statistics / get_exam_history
- get_package_statistics / get_ticket_statistics / get_topic_statistics /
  get_marathon_statistics / get_leaderboard
- abandon_stale_sessions (maintenance)

Every mutation of an existing session runs under ``session_lock`` with the
session row locked. Expiry is lazy: any access to an open session whose
deadline has passed first closes it as EXPIRED with ``finished_at`` set to
the deadline.

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional

from django.core.cache import cache
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from ..conf import ExamSettings, get_exam_settings
from ..content.models import ExamPackage, Topic
from ..exams.models import ExamMode, ExamSession, ExamStatus, SessionQuestion
from ..exceptions import InvalidExamRequest, SessionClosed, SessionNotFinished
from . import answer_evaluator
from .answer_evaluator import CheckAnswer
from .cache_keys import CacheKey
from .content_catalog import ContentCatalog
from .package_statistics import PackageStatistics, aggregate_package_statistics
from .result_aggregator import (
    AnswerDetail,
    SessionResult,
    SessionStatistics,
    average_time,
    build_answer_details,
    compute_result,
    compute_statistics,
)
from .session_builder import ExamSessionBuilder, StartExamRequest
from .session_locks import session_lock
from .session_repository import ExamSessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionPayload:
    session: ExamSession
    questions: List[SessionQuestion]


@dataclass(frozen=True)
class ExamResult:
    session: ExamSession
    result: SessionResult
    answer_details: List[AnswerDetail] = field(default_factory=list)


@dataclass(frozen=True)
class ExamStatistics:
    session: ExamSession
    statistics: SessionStatistics


@dataclass(frozen=True)
class PackageStatisticsResult:
    package: ExamPackage
    statistics: PackageStatistics


@dataclass(frozen=True)
class ScopedStatisticsResult:
    """Rollup of a ticket, a topic or all marathon sessions of one user."""

    scope: str
    subject: Optional[Any]
    statistics: PackageStatistics


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user_id: int
    user_name: str
    best_score: float
    average_score: float
    total_exams: int


@dataclass(frozen=True)
class Leaderboard:
    topic: Optional[Topic]
    entries: List[LeaderboardEntry]


def stored_result(session: ExamSession) -> SessionResult:
    """Rebuild the result written when ``session`` closed."""
    answered = session.answered_count or 0
    duration = session.duration_seconds or 0
    return SessionResult(
        total_questions=session.total_questions,
        answered_count=answered,
        correct_count=session.correct_count or 0,
        incorrect_count=session.incorrect_count or 0,
        unanswered_count=(
            session.unanswered_count
            if session.unanswered_count is not None
            else session.total_questions - answered
        ),
        score=session.score or 0,
        percentage=session.percentage or 0.0,
        is_passed=bool(session.is_passed),
        passing_score=session.passing_score,
        duration_seconds=duration,
        average_time_per_question=average_time(duration, answered),
    )


class ExamService:
    """
    Entry point for every exam engine operation.

    Example:
        >>> service = ExamService()
        >>> payload = service.start_exam(user, StartExamRequest(ticket_id=3))
        >>> service.submit_answer(user, payload.session.pk, question_id=10,
        ...                       selected_option_index=1, time_spent_seconds=12)
        >>> result = service.finish_exam(user, payload.session.pk)
    """

    def __init__(
        self,
        catalog: Optional[ContentCatalog] = None,
        repository: Optional[ExamSessionRepository] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = timezone.now,
        settings: Optional[ExamSettings] = None,
        cache_backend=None,
    ) -> None:
        self.catalog = catalog or ContentCatalog()
        self.repository = repository or ExamSessionRepository()
        self.clock = clock
        self.settings = settings or get_exam_settings()
        self.cache = cache_backend or cache
        self.builder = ExamSessionBuilder(
            catalog=self.catalog,
            repository=self.repository,
            rng=rng,
            clock=clock,
            settings=self.settings,
        )

    # --- Session lifecycle ---

    def start_exam(self, user, request: StartExamRequest) -> SessionPayload:
        session = self.builder.build(request, user)
        return SessionPayload(session=session, questions=self.repository.session_questions(session))

    def get_session(self, user, session_id: int) -> SessionPayload:
        session = self.repository.get_for_user(session_id, user)
        if session.is_open and session.is_past_deadline(self.clock()):
            session = self._expire_locked(user, session_id)
        return SessionPayload(session=session, questions=self.repository.session_questions(session))

    def get_active_session(self, user) -> Optional[SessionPayload]:
        """Newest open session of ``user``, expiring overdue ones on the way."""
        self._expire_overdue(user)
        session = self.repository.active_session(user)
        if session is None:
            return None
        return SessionPayload(session=session, questions=self.repository.session_questions(session))

    def submit_answer(
        self,
        user,
        session_id: int,
        question_id: int,
        selected_option_index: Optional[int],
        time_spent_seconds: int = 0,
    ) -> CheckAnswer:
        """
        Record (or overwrite) the answer to one question and grade it.

        Raises:
            SessionNotFound: Missing session or owned by someone else
            SessionClosed: Terminal session, including one that expires now
            QuestionNotInSession: Question outside the frozen set
            InvalidExamRequest: Negative time or option index out of range
        """
        with session_lock(session_id):
            session = self.repository.lock_for_user(session_id, user)
            now = self.clock()
            if not self._expire_if_due(session, now):
                answer_evaluator.ensure_open(session)
                return self._record_answer(session, question_id, selected_option_index, time_spent_seconds, now)

        # The expiry above is committed before the caller is told
        raise SessionClosed(session.pk, session.status, message="Exam session has expired")

    def submit_all(self, user, session_id: int, answers: Iterable[Dict[str, Any]]) -> ExamResult:
        """
        Record a batch of answers and finish the session in one step.

        Each item holds ``question_id``, ``selected_option_index`` (may be
        None) and ``time_spent_seconds``. Any invalid item rejects the whole
        batch.
        """
        answers = list(answers)
        question_ids = [item["question_id"] for item in answers]
        if len(question_ids) != len(set(question_ids)):
            raise InvalidExamRequest("Each question may appear only once", field="answers")

        with session_lock(session_id):
            session = self.repository.lock_for_user(session_id, user)
            now = self.clock()
            if not self._expire_if_due(session, now):
                answer_evaluator.ensure_open(session)
                for item in answers:
                    self._record_answer(
                        session,
                        item["question_id"],
                        item.get("selected_option_index"),
                        item.get("time_spent_seconds", 0) or 0,
                        now,
                    )
                self._close(session, ExamStatus.FINISHED, now)
                return self._result(session)

        raise SessionClosed(session.pk, session.status, message="Exam session has expired")

    def finish_exam(self, user, session_id: int) -> ExamResult:
        """
        Close a session and return its result.

        Finishing an already FINISHED or EXPIRED session returns the stored
        result without writing anything.

        Raises:
            SessionNotFound: Missing session or owned by someone else
            SessionClosed: The session was abandoned
        """
        with session_lock(session_id):
            session = self.repository.lock_for_user(session_id, user)
            if session.is_completed:
                return self._result(session)
            if session.status == ExamStatus.ABANDONED:
                raise SessionClosed(session.pk, session.status)

            now = self.clock()
            if not self._expire_if_due(session, now):
                self._close(session, ExamStatus.FINISHED, now)
            return self._result(session)

    def abandon_exam(self, user, session_id: int) -> ExamSession:
        with session_lock(session_id):
            session = self.repository.lock_for_user(session_id, user)
            now = self.clock()
            if not self._expire_if_due(session, now):
                answer_evaluator.ensure_transition(session, ExamStatus.ABANDONED)
                self.repository.close(session, ExamStatus.ABANDONED, now)
                logger.info(f"Exam session {session.pk} abandoned by user {user.pk}")
                return session

        raise SessionClosed(session.pk, session.status, message="Exam session has expired")

    # --- Results ---

    def get_result(self, user, session_id: int) -> ExamResult:
        session = self._closed_session(user, session_id)
        return self._result(session)

    def get_statistics(self, user, session_id: int) -> ExamStatistics:
        session = self._closed_session(user, session_id)
        answers = self.repository.answers(session)
        return ExamStatistics(
            session=session,
            statistics=compute_statistics(stored_result(session), answers),
        )

    def get_exam_history(
        self,
        user,
        status: Optional[str] = None,
        mode: Optional[str] = None,
        package_id: Optional[int] = None,
    ) -> QuerySet:
        """User's sessions, newest first, optionally filtered."""
        self._expire_overdue(user)
        return self.repository.history(user, status=status, mode=mode, package_id=package_id)

    def get_package_statistics(self, user, package_id: int) -> PackageStatisticsResult:
        """
        Roll up the user's completed sessions of one package.

        Cached under ``user_stats:{user}:package:{package}``; the key is
        dropped whenever a session of the pair closes.
        """
        package = self.catalog.get_package(package_id)
        statistics = self._rollup(user, ("package", package.pk), package_id=package.pk)
        return PackageStatisticsResult(package=package, statistics=statistics)

    def get_ticket_statistics(self, user, ticket_id: int) -> ScopedStatisticsResult:
        ticket = self.catalog.get_ticket(ticket_id)
        statistics = self._rollup(user, ("ticket", ticket.pk), ticket_id=ticket.pk)
        return ScopedStatisticsResult(scope="ticket", subject=ticket, statistics=statistics)

    def get_topic_statistics(self, user, topic_id: int) -> ScopedStatisticsResult:
        """Every closed session tied to the topic, whatever its mode."""
        topic = self.catalog.get_topic(topic_id)
        statistics = self._rollup(user, ("topic", topic.pk), topic_id=topic.pk)
        return ScopedStatisticsResult(scope="topic", subject=topic, statistics=statistics)

    def get_marathon_statistics(self, user) -> ScopedStatisticsResult:
        statistics = self._rollup(user, ("marathon",), mode=ExamMode.MARATHON)
        return ScopedStatisticsResult(scope="marathon", subject=None, statistics=statistics)

    def get_leaderboard(self, topic_id: Optional[int] = None, limit: Optional[int] = None) -> Leaderboard:
        """
        Users ranked by their best closed session, globally or for one topic.

        Cached under ``leaderboard:global:{limit}`` or
        ``leaderboard:topic:{topic}:{limit}`` until the TTL runs out.

        Raises:
            InvalidExamRequest: ``limit`` outside 1..max_leaderboard_size
            ContentNotFound: Missing or inactive topic
        """
        limit = limit if limit is not None else self.settings.leaderboard_size
        if not 1 <= limit <= self.settings.max_leaderboard_size:
            raise InvalidExamRequest(
                f"limit must be between 1 and {self.settings.max_leaderboard_size}",
                field="limit",
                value=limit,
            )

        topic = self.catalog.get_topic(topic_id) if topic_id is not None else None
        if topic is None:
            cache_key = CacheKey.LEADERBOARD.key("global", limit)
        else:
            cache_key = CacheKey.LEADERBOARD.key("topic", topic.pk, limit)

        entries = self.cache.get(cache_key)
        if entries is None:
            rows = self.repository.leaderboard(topic_id=topic_id, limit=limit)
            entries = [LeaderboardEntry(rank=rank, **row) for rank, row in enumerate(rows, start=1)]
            self.cache.set(cache_key, entries, timeout=CacheKey.LEADERBOARD.ttl_seconds)
        return Leaderboard(topic=topic, entries=entries)
    # --- Maintenance ---

    def abandon_stale_sessions(
        self, now: Optional[datetime] = None, grace_hours: Optional[int] = None, dry_run: bool = False
    ) -> int:
        """
        Mark open sessions whose deadline passed more than ``grace_hours`` ago
        as ABANDONED.

        Returns:
            Number of sessions affected (or that would be, with ``dry_run``)
        """
        now = now or self.clock()
        if grace_hours is None:
            grace_hours = self.settings.stale_session_grace_hours
        stale = self.repository.stale_sessions(now - timedelta(hours=grace_hours))

        if dry_run:
            return stale.count()
        count = self.repository.abandon_many(stale, now)
        logger.info(f"Abandoned {count} stale exam sessions (grace {grace_hours}h)")
        return count

    # --- Internals ---

    def _record_answer(
        self,
        session: ExamSession,
        question_id: int,
        selected_option_index: Optional[int],
        time_spent_seconds: int,
        now: datetime,
    ) -> CheckAnswer:
        entry = self.repository.find_session_question(session, question_id)
        check = answer_evaluator.evaluate(entry, selected_option_index, time_spent_seconds)
        self.repository.upsert_answer(
            session,
            question_id,
            selected_option_index,
            time_spent_seconds,
            check.is_correct,
            now,
        )
        if session.status == ExamStatus.STARTED:
            self.repository.mark_in_progress(session)
            logger.info(f"Exam session {session.pk} is now in progress")
        return check

    def _expire_if_due(self, session: ExamSession, now: datetime) -> bool:
        if not (session.is_open and session.is_past_deadline(now)):
            return False
        self._close(session, ExamStatus.EXPIRED, session.expires_at)
        return True

    def _expire_locked(self, user, session_id: int) -> ExamSession:
        with session_lock(session_id):
            session = self.repository.lock_for_user(session_id, user)
            self._expire_if_due(session, self.clock())
            return session

    def _expire_overdue(self, user) -> None:
        now = self.clock()
        overdue = self.repository.history(user).filter(
            status__in=(ExamStatus.STARTED, ExamStatus.IN_PROGRESS), expires_at__lt=now
        )
        for session_id in overdue.values_list("pk", flat=True):
            self._expire_locked(user, session_id)

    def _close(self, session: ExamSession, status: str, finished_at: datetime) -> None:
        answer_evaluator.ensure_transition(session, status)
        result = compute_result(
            session.total_questions,
            self.repository.answers(session),
            session.passing_score,
            session.started_at,
            finished_at,
        )
        self.repository.close(session, status, finished_at, result)
        logger.info(
            f"Exam session {session.pk} {status.lower()}: {result.correct_count}/"
            f"{result.total_questions} correct ({result.percentage:.1f}%), "
            f"passed={result.is_passed}"
        )

        stats_keys = self._statistics_keys(session)
        transaction.on_commit(lambda: self.cache.delete_many(stats_keys))

    @staticmethod
    def _statistics_keys(session: ExamSession) -> List[str]:
        """Rollup cache keys a closing session can change."""
        scopes = [
            ("package", session.package_id),
            ("ticket", session.ticket_id),
            ("topic", session.topic_id),
        ]
        keys = [
            CacheKey.USER_STATS.key(session.user_id, scope, subject_id)
            for scope, subject_id in scopes
            if subject_id is not None
        ]
        if session.is_marathon:
            keys.append(CacheKey.USER_STATS.key(session.user_id, "marathon"))
        return keys

    def _rollup(self, user, scope: tuple, **filters) -> PackageStatistics:
        self._expire_overdue(user)
        cache_key = CacheKey.USER_STATS.key(user.pk, *scope)
        statistics = self.cache.get(cache_key)
        if statistics is None:
            # Each scope counts as a single test
            statistics = aggregate_package_statistics(
                self.repository.completed(user, **filters), total_tests_in_package=1
            )
            self.cache.set(cache_key, statistics, timeout=CacheKey.USER_STATS.ttl_seconds)
        return statistics

    def _closed_session(self, user, session_id: int) -> ExamSession:
        session = self.repository.get_for_user(session_id, user)
        if session.is_open and session.is_past_deadline(self.clock()):
            session = self._expire_locked(user, session_id)
        if session.is_open:
            raise SessionNotFinished(session.pk, session.status)
        if session.status == ExamStatus.ABANDONED:
            raise SessionClosed(
                session.pk, session.status, message="Abandoned exam sessions have no result"
            )
        return session

    def _result(self, session: ExamSession) -> ExamResult:
        return ExamResult(
            session=session,
            result=stored_result(session),
            answer_details=build_answer_details(
                self.repository.session_questions(session),
                self.repository.answers_by_question(session),
            ),
        )
