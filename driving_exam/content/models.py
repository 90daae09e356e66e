from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from ..localization import LocalizedText


class LocalizedNameMixin(models.Model):
    name_uzl = models.CharField(max_length=255)
    name_uzc = models.CharField(max_length=255, blank=True)
    name_en = models.CharField(max_length=255, blank=True)
    name_ru = models.CharField(max_length=255, blank=True)

    class Meta:
        abstract = True

    @property
    def name(self) -> LocalizedText:
        return LocalizedText.from_fields(self, "name")

    def __str__(self):
        return self.name_uzl


class Topic(LocalizedNameMixin):
    code = models.SlugField(max_length=50, unique=True)
    description_uzl = models.TextField(blank=True)
    description_uzc = models.TextField(blank=True)
    description_en = models.TextField(blank=True)
    description_ru = models.TextField(blank=True)
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Topic")
        verbose_name_plural = _("Topics")
        ordering = ["display_order", "id"]


class ExamPackage(LocalizedNameMixin):
    topic = models.ForeignKey(
        Topic,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="packages",
    )
    question_count = models.PositiveSmallIntegerField(
        default=20,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
        help_text=_("Number of questions drawn for one exam of this package."),
    )
    duration_minutes = models.PositiveSmallIntegerField(
        default=30, validators=[MinValueValidator(1)]
    )
    passing_score = models.PositiveSmallIntegerField(
        default=70,
        validators=[MinValueValidator(1), MaxValueValidator(100)],
        help_text=_("Minimum percentage needed to pass."),
    )
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Exam Package")
        verbose_name_plural = _("Exam Packages")
        ordering = ["display_order", "id"]


class Question(models.Model):
    topic = models.ForeignKey(
        Topic,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="questions",
    )
    packages = models.ManyToManyField(
        ExamPackage, blank=True, related_name="questions"
    )
    text_uzl = models.TextField()
    text_uzc = models.TextField(blank=True)
    text_en = models.TextField(blank=True)
    text_ru = models.TextField(blank=True)
    explanation_uzl = models.TextField(blank=True)
    explanation_uzc = models.TextField(blank=True)
    explanation_en = models.TextField(blank=True)
    explanation_ru = models.TextField(blank=True)
    image_url = models.CharField(max_length=500, blank=True, null=True)
    correct_answer_index = models.PositiveSmallIntegerField(
        help_text=_("Zero-based index of the correct option."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Question")
        verbose_name_plural = _("Questions")
        ordering = ["id"]

    def __str__(self):
        return self.text_uzl[:60]

    @property
    def text(self) -> LocalizedText:
        return LocalizedText.from_fields(self, "text")

    @property
    def explanation(self) -> LocalizedText:
        return LocalizedText.from_fields(self, "explanation")


class QuestionOption(models.Model):
    question = models.ForeignKey(
        Question, on_delete=models.CASCADE, related_name="options"
    )
    option_index = models.PositiveSmallIntegerField()
    text_uzl = models.CharField(max_length=500)
    text_uzc = models.CharField(max_length=500, blank=True)
    text_en = models.CharField(max_length=500, blank=True)
    text_ru = models.CharField(max_length=500, blank=True)

    class Meta:
        verbose_name = _("Question Option")
        verbose_name_plural = _("Question Options")
        ordering = ["question", "option_index"]
        constraints = [
            models.UniqueConstraint(
                fields=["question", "option_index"], name="unique_option_index_per_question"
            )
        ]

    def __str__(self):
        return f"{self.option_index}: {self.text_uzl[:40]}"

    @property
    def text(self) -> LocalizedText:
        return LocalizedText.from_fields(self, "text")


class Ticket(LocalizedNameMixin):
    ticket_number = models.PositiveIntegerField()
    package = models.ForeignKey(
        ExamPackage,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="tickets",
    )
    topic = models.ForeignKey(
        Topic,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tickets",
    )
    duration_minutes = models.PositiveSmallIntegerField(
        default=30, validators=[MinValueValidator(1)]
    )
    passing_score = models.PositiveSmallIntegerField(
        default=70, validators=[MinValueValidator(1), MaxValueValidator(100)]
    )
    questions = models.ManyToManyField(
        Question, through="TicketQuestion", related_name="tickets"
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Ticket")
        verbose_name_plural = _("Tickets")
        ordering = ["package", "ticket_number"]

    def __str__(self):
        return f"Ticket #{self.ticket_number}"


class TicketQuestion(models.Model):
    ticket = models.ForeignKey(
        Ticket, on_delete=models.CASCADE, related_name="ticket_questions"
    )
    question = models.ForeignKey(
        Question, on_delete=models.CASCADE, related_name="ticket_entries"
    )
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        verbose_name = _("Ticket Question")
        verbose_name_plural = _("Ticket Questions")
        ordering = ["ticket", "position"]
        constraints = [
            models.UniqueConstraint(
                fields=["ticket", "question"], name="unique_question_per_ticket"
            )
        ]

    def __str__(self):
        return f"Ticket {self.ticket_id} / position {self.position}"
