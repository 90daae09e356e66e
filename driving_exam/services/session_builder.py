"""
Exam Session Builder

Assembles a new exam session from a start request in one of three modes:

- Ticket: the ticket's predefined questions in their stored order
- Package: a random sample of the package's active questions
  (optionally restricted to one topic)
- Marathon: a random sample across all active questions
  (optionally restricted to one topic)

The session row, its frozen question snapshot and its timestamps are written
in a single transaction; a failed build leaves nothing behind.

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from django.utils import timezone

from ..conf import ExamSettings, get_exam_settings
from ..exams.models import ExamMode, ExamSession
from ..exceptions import InvalidExamRequest
from .content_catalog import ContentCatalog
from .session_repository import ExamSessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartExamRequest:
    ticket_id: Optional[int] = None
    package_id: Optional[int] = None
    marathon: bool = False
    question_count: Optional[int] = None
    topic_id: Optional[int] = None
    duration_minutes: Optional[int] = None
    passing_score: Optional[int] = None
    visible_mode: bool = False

    @property
    def mode(self) -> str:
        """The single requested mode. Raises InvalidExamRequest otherwise."""
        chosen = [
            mode
            for mode, selected in (
                (ExamMode.TICKET, self.ticket_id is not None),
                (ExamMode.PACKAGE, self.package_id is not None),
                (ExamMode.MARATHON, bool(self.marathon)),
            )
            if selected
        ]
        if len(chosen) != 1:
            raise InvalidExamRequest(
                "Choose exactly one of ticket_id, package_id or marathon",
                field="mode",
                chosen=[str(mode) for mode in chosen],
            )
        return chosen[0]


@dataclass
class _Plan:
    mode: str
    questions: List[Dict[str, Any]]
    duration_minutes: int
    passing_score: int
    package: Any = None
    ticket: Any = None
    topic: Any = None


class ExamSessionBuilder:
    """
    Builds and persists exam sessions.

    Args:
        catalog: Content source, cached
        repository: Session storage
        rng: Random source used for sampling; pass a seeded
            ``random.Random`` for deterministic draws
        clock: Returns the current aware datetime
        settings: Engine limits; read from Django settings when omitted
    """

    def __init__(
        self,
        catalog: Optional[ContentCatalog] = None,
        repository: Optional[ExamSessionRepository] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = timezone.now,
        settings: Optional[ExamSettings] = None,
    ) -> None:
        self.catalog = catalog or ContentCatalog()
        self.repository = repository or ExamSessionRepository()
        self.rng = rng or random.SystemRandom()
        self.clock = clock
        self.settings = settings or get_exam_settings()

    def build(self, request: StartExamRequest, user) -> ExamSession:
        """
        Validate a start request, select questions and persist the session.

        Raises:
            InvalidExamRequest: Mode, count, duration or passing score violate
                the configured limits, or the pool is too small
            ContentNotFound: The ticket, package or topic is missing or inactive
            ContentUnavailable: The catalog or the cache failed
        """
        mode = request.mode
        if mode == ExamMode.TICKET:
            plan = self._plan_ticket(request)
        elif mode == ExamMode.PACKAGE:
            plan = self._plan_package(request)
        else:
            plan = self._plan_marathon(request)

        self._validate_duration(plan.duration_minutes)
        self._validate_passing_score(plan.passing_score)

        started_at = self.clock()
        session = self.repository.create(
            plan.questions,
            user=user,
            mode=plan.mode,
            package=plan.package,
            ticket=plan.ticket,
            topic=plan.topic,
            visible_mode=bool(request.visible_mode),
            duration_minutes=plan.duration_minutes,
            passing_score=plan.passing_score,
            started_at=started_at,
            expires_at=started_at + timedelta(minutes=plan.duration_minutes),
        )
        logger.info(
            f"Exam session {session.pk} started for user {user.pk}: mode={plan.mode} "
            f"questions={len(plan.questions)} duration={plan.duration_minutes}min "
            f"visible={session.visible_mode}"
        )
        return session

    # --- Mode planners ---

    def _plan_ticket(self, request: StartExamRequest) -> _Plan:
        ticket = self.catalog.get_ticket(request.ticket_id)
        questions = self.catalog.ticket_questions(ticket)
        self._validate_count(len(questions))
        return _Plan(
            mode=ExamMode.TICKET,
            questions=questions,
            duration_minutes=ticket.duration_minutes,
            passing_score=ticket.passing_score,
            package=ticket.package,
            ticket=ticket,
            topic=ticket.topic,
        )

    def _plan_package(self, request: StartExamRequest) -> _Plan:
        package = self.catalog.get_package(request.package_id)
        topic = self.catalog.get_topic(request.topic_id) if request.topic_id is not None else None
        count = request.question_count if request.question_count is not None else package.question_count
        self._validate_count(count)
        pool = self.catalog.package_questions(package, topic_id=request.topic_id)
        return _Plan(
            mode=ExamMode.PACKAGE,
            questions=self._sample(pool, count),
            duration_minutes=package.duration_minutes,
            passing_score=package.passing_score,
            package=package,
            topic=topic or package.topic,
        )

    def _plan_marathon(self, request: StartExamRequest) -> _Plan:
        count = request.question_count
        if count is None:
            raise InvalidExamRequest("Marathon mode needs a question count", field="question_count")
        self._validate_count(count)
        if not self.settings.marathon_min_questions <= count <= self.settings.marathon_max_questions:
            raise InvalidExamRequest(
                f"Marathon question count must be between {self.settings.marathon_min_questions} "
                f"and {self.settings.marathon_max_questions}",
                field="question_count",
                value=count,
            )

        if request.topic_id is not None:
            topic = self.catalog.get_topic(request.topic_id)
            pool = self.catalog.topic_questions(topic.id)
        else:
            topic = None
            pool = self.catalog.all_questions()

        duration = request.duration_minutes
        if duration is None:
            duration = max(self.settings.marathon_min_duration_minutes, count)
        passing_score = request.passing_score
        if passing_score is None:
            passing_score = self.settings.marathon_default_passing_score

        return _Plan(
            mode=ExamMode.MARATHON,
            questions=self._sample(pool, count),
            duration_minutes=duration,
            passing_score=passing_score,
            topic=topic,
        )

    # --- Validation and selection ---

    def _sample(self, pool: List[Dict[str, Any]], count: int) -> List[Dict[str, Any]]:
        if len(pool) < count:
            raise InvalidExamRequest(
                f"Only {len(pool)} questions are available, {count} requested",
                field="question_count",
                requested=count,
                available=len(pool),
            )
        return self.rng.sample(pool, count)

    def _validate_count(self, count: int) -> None:
        low = self.settings.min_questions_per_exam
        high = self.settings.max_questions_per_exam
        if count is None or not low <= count <= high:
            raise InvalidExamRequest(
                f"Question count must be between {low} and {high}",
                field="question_count",
                value=count,
            )

    def _validate_duration(self, minutes: int) -> None:
        low = self.settings.min_duration_minutes
        high = self.settings.max_duration_minutes
        if minutes is None or minutes <= 0 or not low <= minutes <= high:
            raise InvalidExamRequest(
                f"Duration must be between {low} and {high} minutes",
                field="duration_minutes",
                value=minutes,
            )

    @staticmethod
    def _validate_passing_score(score: int) -> None:
        if score is None or not 0 < score <= 100:
            raise InvalidExamRequest(
                "Passing score must be between 1 and 100",
                field="passing_score",
                value=score,
            )
