"""
Exam engine settings.

Values come from ``settings.EXAM_ENGINE``; missing keys fall back to the
defaults below.
"""

from dataclasses import dataclass, fields

from django.conf import settings


@dataclass(frozen=True)
class ExamSettings:
    default_duration_minutes: int = 30
    passing_score_percentage: int = 70
    min_duration_minutes: int = 5
    max_duration_minutes: int = 180
    min_questions_per_exam: int = 1
    max_questions_per_exam: int = 100
    marathon_min_duration_minutes: int = 10
    marathon_default_passing_score: int = 70
    marathon_min_questions: int = 5
    marathon_max_questions: int = 100
    stale_session_grace_hours: int = 24
    leaderboard_size: int = 10
    max_leaderboard_size: int = 100


def get_exam_settings() -> ExamSettings:
    """
    Build an ExamSettings from ``settings.EXAM_ENGINE``.

    Keys are matched case-insensitively against the dataclass fields, so both
    ``MAX_DURATION_MINUTES`` and ``max_duration_minutes`` work. Read on every
    call so ``override_settings`` in tests takes effect.
    """
    configured = getattr(settings, "EXAM_ENGINE", None) or {}
    normalized = {str(key).lower(): value for key, value in configured.items()}
    values = {
        field.name: int(normalized[field.name])
        for field in fields(ExamSettings)
        if normalized.get(field.name) is not None
    }
    return ExamSettings(**values)
