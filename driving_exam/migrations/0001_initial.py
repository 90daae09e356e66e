import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Topic",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name_uzl", models.CharField(max_length=255)),
                ("name_uzc", models.CharField(blank=True, max_length=255)),
                ("name_en", models.CharField(blank=True, max_length=255)),
                ("name_ru", models.CharField(blank=True, max_length=255)),
                ("code", models.SlugField(unique=True)),
                ("description_uzl", models.TextField(blank=True)),
                ("description_uzc", models.TextField(blank=True)),
                ("description_en", models.TextField(blank=True)),
                ("description_ru", models.TextField(blank=True)),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Topic",
                "verbose_name_plural": "Topics",
                "ordering": ["display_order", "id"],
            },
        ),
        migrations.CreateModel(
            name="ExamPackage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name_uzl", models.CharField(max_length=255)),
                ("name_uzc", models.CharField(blank=True, max_length=255)),
                ("name_en", models.CharField(blank=True, max_length=255)),
                ("name_ru", models.CharField(blank=True, max_length=255)),
                (
                    "question_count",
                    models.PositiveSmallIntegerField(
                        default=20,
                        help_text="Number of questions drawn for one exam of this package.",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                (
                    "duration_minutes",
                    models.PositiveSmallIntegerField(
                        default=30, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "passing_score",
                    models.PositiveSmallIntegerField(
                        default=70,
                        help_text="Minimum percentage needed to pass.",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                ("display_order", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "topic",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="packages",
                        to="driving_exam.topic",
                    ),
                ),
            ],
            options={
                "verbose_name": "Exam Package",
                "verbose_name_plural": "Exam Packages",
                "ordering": ["display_order", "id"],
            },
        ),
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("text_uzl", models.TextField()),
                ("text_uzc", models.TextField(blank=True)),
                ("text_en", models.TextField(blank=True)),
                ("text_ru", models.TextField(blank=True)),
                ("explanation_uzl", models.TextField(blank=True)),
                ("explanation_uzc", models.TextField(blank=True)),
                ("explanation_en", models.TextField(blank=True)),
                ("explanation_ru", models.TextField(blank=True)),
                ("image_url", models.CharField(blank=True, max_length=500, null=True)),
                (
                    "correct_answer_index",
                    models.PositiveSmallIntegerField(help_text="Zero-based index of the correct option."),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "packages",
                    models.ManyToManyField(blank=True, related_name="questions", to="driving_exam.exampackage"),
                ),
                (
                    "topic",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="questions",
                        to="driving_exam.topic",
                    ),
                ),
            ],
            options={
                "verbose_name": "Question",
                "verbose_name_plural": "Questions",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="QuestionOption",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("option_index", models.PositiveSmallIntegerField()),
                ("text_uzl", models.CharField(max_length=500)),
                ("text_uzc", models.CharField(blank=True, max_length=500)),
                ("text_en", models.CharField(blank=True, max_length=500)),
                ("text_ru", models.CharField(blank=True, max_length=500)),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="options",
                        to="driving_exam.question",
                    ),
                ),
            ],
            options={
                "verbose_name": "Question Option",
                "verbose_name_plural": "Question Options",
                "ordering": ["question", "option_index"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("question", "option_index"), name="unique_option_index_per_question"
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="Ticket",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name_uzl", models.CharField(max_length=255)),
                ("name_uzc", models.CharField(blank=True, max_length=255)),
                ("name_en", models.CharField(blank=True, max_length=255)),
                ("name_ru", models.CharField(blank=True, max_length=255)),
                ("ticket_number", models.PositiveIntegerField()),
                (
                    "duration_minutes",
                    models.PositiveSmallIntegerField(
                        default=30, validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "passing_score",
                    models.PositiveSmallIntegerField(
                        default=70,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "package",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tickets",
                        to="driving_exam.exampackage",
                    ),
                ),
                (
                    "topic",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="tickets",
                        to="driving_exam.topic",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ticket",
                "verbose_name_plural": "Tickets",
                "ordering": ["package", "ticket_number"],
            },
        ),
        migrations.CreateModel(
            name="TicketQuestion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("position", models.PositiveSmallIntegerField(default=0)),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ticket_entries",
                        to="driving_exam.question",
                    ),
                ),
                (
                    "ticket",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ticket_questions",
                        to="driving_exam.ticket",
                    ),
                ),
            ],
            options={
                "verbose_name": "Ticket Question",
                "verbose_name_plural": "Ticket Questions",
                "ordering": ["ticket", "position"],
                "constraints": [
                    models.UniqueConstraint(fields=("ticket", "question"), name="unique_question_per_ticket")
                ],
            },
        ),
        migrations.AddField(
            model_name="ticket",
            name="questions",
            field=models.ManyToManyField(
                related_name="tickets", through="driving_exam.TicketQuestion", to="driving_exam.question"
            ),
        ),
        migrations.CreateModel(
            name="ExamSession",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "mode",
                    models.CharField(
                        choices=[("ticket", "Ticket"), ("package", "Package"), ("marathon", "Marathon")],
                        max_length=10,
                    ),
                ),
                (
                    "visible_mode",
                    models.BooleanField(
                        default=False,
                        help_text="Disclose correct answers and explanations while the exam runs.",
                    ),
                ),
                ("duration_minutes", models.PositiveSmallIntegerField()),
                ("passing_score", models.PositiveSmallIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("STARTED", "Started"),
                            ("IN_PROGRESS", "In progress"),
                            ("FINISHED", "Finished"),
                            ("EXPIRED", "Expired"),
                            ("ABANDONED", "Abandoned"),
                        ],
                        default="STARTED",
                        max_length=15,
                    ),
                ),
                ("started_at", models.DateTimeField()),
                ("expires_at", models.DateTimeField()),
                ("finished_at", models.DateTimeField(blank=True, null=True)),
                ("total_questions", models.PositiveSmallIntegerField(default=0)),
                ("answered_count", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("correct_count", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("incorrect_count", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("unanswered_count", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("score", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("percentage", models.FloatField(blank=True, null=True)),
                ("is_passed", models.BooleanField(blank=True, null=True)),
                ("duration_seconds", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "package",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sessions",
                        to="driving_exam.exampackage",
                    ),
                ),
                (
                    "ticket",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sessions",
                        to="driving_exam.ticket",
                    ),
                ),
                (
                    "topic",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="sessions",
                        to="driving_exam.topic",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="exam_sessions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Exam Session",
                "verbose_name_plural": "Exam Sessions",
                "ordering": ["-started_at", "-id"],
                "indexes": [
                    models.Index(fields=["user", "status"], name="exam_session_user_status"),
                    models.Index(fields=["user", "package", "status"], name="exam_session_user_package"),
                    models.Index(fields=["status", "expires_at"], name="exam_session_status_expiry"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SessionQuestion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("order", models.PositiveSmallIntegerField()),
                ("correct_option_index", models.PositiveSmallIntegerField()),
                ("snapshot", models.JSONField(default=dict)),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="session_entries",
                        to="driving_exam.question",
                    ),
                ),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="session_questions",
                        to="driving_exam.examsession",
                    ),
                ),
            ],
            options={
                "verbose_name": "Session Question",
                "verbose_name_plural": "Session Questions",
                "ordering": ["session", "order"],
                "constraints": [
                    models.UniqueConstraint(fields=("session", "question"), name="unique_question_per_session"),
                    models.UniqueConstraint(fields=("session", "order"), name="unique_order_per_session"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ExamAnswer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "selected_option_index",
                    models.PositiveSmallIntegerField(
                        blank=True, help_text="Empty means the question was left unanswered.", null=True
                    ),
                ),
                ("time_spent_seconds", models.PositiveIntegerField(default=0)),
                ("is_correct", models.BooleanField(blank=True, null=True)),
                ("answered_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "question",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="exam_answers",
                        to="driving_exam.question",
                    ),
                ),
                (
                    "session",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="answers",
                        to="driving_exam.examsession",
                    ),
                ),
            ],
            options={
                "verbose_name": "Exam Answer",
                "verbose_name_plural": "Exam Answers",
                "ordering": ["session", "answered_at"],
                "constraints": [
                    models.UniqueConstraint(fields=("session", "question"), name="unique_answer_per_question")
                ],
            },
        ),
    ]
