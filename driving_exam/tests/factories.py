"""
Test data helpers shared by the driving exam test modules.
"""

from datetime import datetime, timedelta, timezone as dt_timezone

from django.contrib.auth.models import User
from django.core.cache import cache
from django.test import TestCase

from driving_exam.content.models import (
    ExamPackage,
    Question,
    QuestionOption,
    Ticket,
    TicketQuestion,
    Topic,
)


class FrozenClock:
    """Callable clock for the engine; moves only when told to."""

    def __init__(self, now=None):
        self.now = now or datetime(2025, 3, 1, 9, 0, tzinfo=dt_timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


class CacheClearingTestCase(TestCase):
    # Question pools are cached by primary key and the ids repeat between tests
    def setUp(self):
        super().setUp()
        cache.clear()
        self.addCleanup(cache.clear)


def make_user(username="driver", password="Sinov-parol-123"):
    return User.objects.create_user(username=username, password=password)


def make_topic(code="road-signs", name="Yo'l belgilari"):
    return Topic.objects.create(code=code, name_uzl=name, name_ru="Дорожные знаки", name_en="Road signs")


def make_package(name="1-paket", question_count=5, duration=30, passing_score=70, topic=None):
    return ExamPackage.objects.create(
        name_uzl=name,
        name_ru=f"{name} (ru)",
        question_count=question_count,
        duration_minutes=duration,
        passing_score=passing_score,
        topic=topic,
    )


def make_question(
    text="Savol",
    correct=0,
    option_count=4,
    topic=None,
    packages=(),
    explanation="Izoh",
    is_active=True,
):
    question = Question.objects.create(
        text_uzl=text,
        text_uzc=f"{text} (кир)",
        text_ru=f"{text} (ru)",
        explanation_uzl=explanation,
        correct_answer_index=correct,
        topic=topic,
        is_active=is_active,
    )
    for index in range(option_count):
        QuestionOption.objects.create(
            question=question,
            option_index=index,
            text_uzl=f"Variant {index}",
            text_ru=f"Вариант {index}",
        )
    if packages:
        question.packages.add(*packages)
    return question


def make_ticket(questions, package=None, number=1, duration=30, passing_score=70, topic=None):
    ticket = Ticket.objects.create(
        name_uzl=f"Bilet {number}",
        ticket_number=number,
        package=package,
        topic=topic,
        duration_minutes=duration,
        passing_score=passing_score,
    )
    for position, question in enumerate(questions):
        TicketQuestion.objects.create(ticket=ticket, question=question, position=position)
    return ticket
