"""
Content Catalog

Read-only access to exam content (tickets, packages, topics and their active
questions) for the session builder. Question pools are cached through the
Django cache framework and returned as plain dictionaries so a pool can be
stored in Redis or LocMemCache alike.

Question dictionary shape::

    {
        "id": 12,
        "topic_id": 3,
        "text": {"uzl": ..., "uzc": ..., "en": ..., "ru": ...},
        "explanation": {...} or None,
        "image_url": "https://..." or None,
        "correct_option_index": 1,
        "options": [{"id": 40, "index": 0, "text": {...}}, ...],
    }

An explanation is kept when any locale has text. Missing locales fall back
to the Uzbek Latin text, and stay None when that is blank too.

Every database or cache failure surfaces as ``ContentUnavailable``; missing
or inactive tickets, packages and topics surface as ``ContentNotFound``.

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from django.core.cache import cache
from django.db import DatabaseError
from django.db.models import Prefetch

from ..content.models import ExamPackage, Question, QuestionOption, Ticket, Topic
from ..exceptions import ContentNotFound, ContentUnavailable
from .cache_keys import CacheKey

logger = logging.getLogger(__name__)

QuestionData = Dict[str, Any]


def question_to_dict(question: Question) -> QuestionData:
    """Flatten a Question (with prefetched options) into its cacheable form."""
    explanation = question.explanation
    return {
        "id": question.id,
        "topic_id": question.topic_id,
        "text": question.text.to_dict(),
        "explanation": None if explanation.is_blank else explanation.to_dict(),
        "image_url": question.image_url or None,
        "correct_option_index": question.correct_answer_index,
        "options": [
            {"id": option.id, "index": option.option_index, "text": option.text.to_dict()}
            for option in question.options.all()
        ],
    }


class ContentCatalog:
    """
    Cache-then-database lookups of exam content.

    Example:
        >>> catalog = ContentCatalog()
        >>> ticket = catalog.get_ticket(5)
        >>> questions = catalog.ticket_questions(ticket)
    """

    def __init__(self, cache_backend=None) -> None:
        self.cache = cache_backend or cache

    # --- Content lookups ---

    def get_ticket(self, ticket_id: int) -> Ticket:
        ticket = self._query(
            "ticket",
            lambda: Ticket.objects.select_related("package", "topic")
            .filter(pk=ticket_id, is_active=True)
            .first(),
        )
        if ticket is None:
            raise ContentNotFound("ticket", ticket_id)
        return ticket

    def get_package(self, package_id: int) -> ExamPackage:
        package = self._query(
            "package",
            lambda: ExamPackage.objects.select_related("topic")
            .filter(pk=package_id, is_active=True)
            .first(),
        )
        if package is None:
            raise ContentNotFound("package", package_id)
        return package

    def get_topic(self, topic_id: int) -> Topic:
        topic = self._query(
            "topic", lambda: Topic.objects.filter(pk=topic_id, is_active=True).first()
        )
        if topic is None:
            raise ContentNotFound("topic", topic_id)
        return topic

    # --- Question pools ---

    def ticket_questions(self, ticket: Ticket) -> List[QuestionData]:
        """Active questions of a ticket in their stored position order."""

        def load() -> List[QuestionData]:
            entries = (
                ticket.ticket_questions.filter(question__is_active=True)
                .select_related("question")
                .prefetch_related(self._options_prefetch("question__options"))
                .order_by("position", "id")
            )
            return [question_to_dict(entry.question) for entry in entries]

        return self._cached_pool(CacheKey.QUESTIONS.key("ticket", ticket.id), load)

    def package_questions(
        self, package: ExamPackage, topic_id: Optional[int] = None
    ) -> List[QuestionData]:
        pool = self._cached_pool(
            CacheKey.QUESTIONS.key("package", package.id),
            lambda: self._load_questions(package.questions.filter(is_active=True)),
        )
        if topic_id is None:
            return pool
        return [question for question in pool if question["topic_id"] == topic_id]

    def topic_questions(self, topic_id: int) -> List[QuestionData]:
        return self._cached_pool(
            CacheKey.QUESTIONS.key("topic", topic_id),
            lambda: self._load_questions(
                Question.objects.filter(topic_id=topic_id, is_active=True)
            ),
        )

    def all_questions(self) -> List[QuestionData]:
        return self._cached_pool(
            CacheKey.QUESTIONS.key("all"),
            lambda: self._load_questions(Question.objects.filter(is_active=True)),
        )

    # --- Internals ---

    @staticmethod
    def _options_prefetch(lookup: str) -> Prefetch:
        return Prefetch(lookup, queryset=QuestionOption.objects.order_by("option_index"))

    def _load_questions(self, queryset) -> List[QuestionData]:
        questions = queryset.prefetch_related(self._options_prefetch("options")).order_by("id")
        return [question_to_dict(question) for question in questions]

    def _cached_pool(
        self, cache_key: str, loader: Callable[[], List[QuestionData]]
    ) -> List[QuestionData]:
        try:
            cached = self.cache.get(cache_key)
        except Exception as exc:
            logger.error(f"Cache read failed for {cache_key}: {exc}", exc_info=True)
            raise ContentUnavailable(details={"cache_key": cache_key}) from exc

        if cached is not None:
            logger.debug(f"Cache hit for {cache_key} ({len(cached)} questions)")
            return cached

        pool = self._query(cache_key, loader)
        try:
            self.cache.set(cache_key, pool, timeout=CacheKey.QUESTIONS.ttl_seconds)
        except Exception as exc:
            logger.error(f"Cache write failed for {cache_key}: {exc}", exc_info=True)
            raise ContentUnavailable(details={"cache_key": cache_key}) from exc

        logger.debug(f"Cached {len(pool)} questions under {cache_key}")
        return pool

    @staticmethod
    def _query(what: str, loader: Callable[[], Any]) -> Any:
        try:
            return loader()
        except DatabaseError as exc:
            logger.error(f"Content catalog query failed ({what}): {exc}", exc_info=True)
            raise ContentUnavailable(details={"resource": what}) from exc
