from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ..content.models import ExamPackage, Question, Ticket, Topic

User = settings.AUTH_USER_MODEL


class ExamStatus(models.TextChoices):
    STARTED = "STARTED", _("Started")
    IN_PROGRESS = "IN_PROGRESS", _("In progress")
    FINISHED = "FINISHED", _("Finished")
    EXPIRED = "EXPIRED", _("Expired")
    ABANDONED = "ABANDONED", _("Abandoned")


OPEN_STATUSES = (ExamStatus.STARTED, ExamStatus.IN_PROGRESS)
COMPLETED_STATUSES = (ExamStatus.FINISHED, ExamStatus.EXPIRED)


class ExamMode(models.TextChoices):
    TICKET = "ticket", _("Ticket")
    PACKAGE = "package", _("Package")
    MARATHON = "marathon", _("Marathon")


class ExamSession(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="exam_sessions")
    mode = models.CharField(max_length=10, choices=ExamMode.choices)
    package = models.ForeignKey(
        ExamPackage,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sessions",
    )
    ticket = models.ForeignKey(
        Ticket,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sessions",
    )
    topic = models.ForeignKey(
        Topic,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sessions",
    )
    visible_mode = models.BooleanField(
        default=False,
        help_text=_("Disclose correct answers and explanations while the exam runs."),
    )
    duration_minutes = models.PositiveSmallIntegerField()
    passing_score = models.PositiveSmallIntegerField()
    status = models.CharField(
        max_length=15, choices=ExamStatus.choices, default=ExamStatus.STARTED
    )
    started_at = models.DateTimeField()
    expires_at = models.DateTimeField()
    finished_at = models.DateTimeField(null=True, blank=True)

    # Written once when the session closes
    total_questions = models.PositiveSmallIntegerField(default=0)
    answered_count = models.PositiveSmallIntegerField(null=True, blank=True)
    correct_count = models.PositiveSmallIntegerField(null=True, blank=True)
    incorrect_count = models.PositiveSmallIntegerField(null=True, blank=True)
    unanswered_count = models.PositiveSmallIntegerField(null=True, blank=True)
    score = models.PositiveSmallIntegerField(null=True, blank=True)
    percentage = models.FloatField(null=True, blank=True)
    is_passed = models.BooleanField(null=True, blank=True)
    duration_seconds = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Exam Session")
        verbose_name_plural = _("Exam Sessions")
        ordering = ["-started_at", "-id"]
        indexes = [
            models.Index(fields=["user", "status"], name="exam_session_user_status"),
            models.Index(fields=["user", "package", "status"], name="exam_session_user_package"),
            models.Index(fields=["status", "expires_at"], name="exam_session_status_expiry"),
        ]

    def __str__(self):
        return f"Exam session {self.pk} ({self.mode}, {self.status})"

    @property
    def is_marathon(self) -> bool:
        return self.mode == ExamMode.MARATHON

    @property
    def is_ticket_mode(self) -> bool:
        return self.mode == ExamMode.TICKET

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES

    @property
    def is_completed(self) -> bool:
        return self.status in COMPLETED_STATUSES

    def is_past_deadline(self, now=None) -> bool:
        return (now or timezone.now()) > self.expires_at


class SessionQuestion(models.Model):
    """
    One question of a session's frozen question set.

    ``snapshot`` holds the content as it was when the session started::

        {
            "text": {"uzl": ..., "uzc": ..., "en": ..., "ru": ...},
            "explanation": {...} or None,
            "image_url": str or None,
            "options": [{"id": 7, "index": 0, "text": {...}}, ...],
        }
    """

    session = models.ForeignKey(
        ExamSession, on_delete=models.CASCADE, related_name="session_questions"
    )
    question = models.ForeignKey(
        Question, on_delete=models.PROTECT, related_name="session_entries"
    )
    order = models.PositiveSmallIntegerField()
    correct_option_index = models.PositiveSmallIntegerField()
    snapshot = models.JSONField(default=dict)

    class Meta:
        verbose_name = _("Session Question")
        verbose_name_plural = _("Session Questions")
        ordering = ["session", "order"]
        constraints = [
            models.UniqueConstraint(
                fields=["session", "question"], name="unique_question_per_session"
            ),
            models.UniqueConstraint(
                fields=["session", "order"], name="unique_order_per_session"
            ),
        ]

    def __str__(self):
        return f"Session {self.session_id} / #{self.order}"

    @property
    def options(self) -> list:
        return self.snapshot.get("options", [])

    @property
    def option_count(self) -> int:
        return len(self.options)


class ExamAnswer(models.Model):
    session = models.ForeignKey(
        ExamSession, on_delete=models.CASCADE, related_name="answers"
    )
    question = models.ForeignKey(
        Question, on_delete=models.PROTECT, related_name="exam_answers"
    )
    selected_option_index = models.PositiveSmallIntegerField(
        null=True, blank=True, help_text=_("Empty means the question was left unanswered.")
    )
    time_spent_seconds = models.PositiveIntegerField(default=0)
    is_correct = models.BooleanField(null=True, blank=True)
    answered_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Exam Answer")
        verbose_name_plural = _("Exam Answers")
        ordering = ["session", "answered_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["session", "question"], name="unique_answer_per_question"
            )
        ]

    def __str__(self):
        return f"Answer for question {self.question_id} in session {self.session_id}"
