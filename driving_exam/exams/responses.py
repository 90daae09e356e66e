"""
Response mappers of the exam API.

Every localized field is rendered for the requested language, or as a
``{"uzl", "uzc", "en", "ru"}`` object when ``language`` is None.

The session payload is the only place where correct answers can leak before
the end of an exam: ``correct_option_index`` and ``explanation`` are added to
each question only when the session was started in visible mode, and the
keys are absent otherwise.
"""

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from ..localization import AcceptLanguage, LocalizedText
from ..services.answer_evaluator import CheckAnswer
from ..services.exam_service import (
    ExamResult,
    ExamStatistics,
    Leaderboard,
    PackageStatisticsResult,
    ScopedStatisticsResult,
    SessionPayload,
)
from .models import ExamSession, SessionQuestion


def localized(data: Optional[Dict[str, Optional[str]]], language: Optional[AcceptLanguage]):
    text = LocalizedText.from_dict(data)
    if text is None:
        return None
    return text.render(language)


def _name(instance, language: Optional[AcceptLanguage]):
    if instance is None:
        return None
    return instance.name.render(language)


def options_payload(options: List[Dict[str, Any]], language: Optional[AcceptLanguage]) -> List[Dict[str, Any]]:
    return [
        {"id": option.get("id"), "index": option["index"], "text": localized(option.get("text"), language)}
        for option in sorted(options, key=lambda option: option["index"])
    ]


def question_payload(
    entry: SessionQuestion, visible_mode: bool, language: Optional[AcceptLanguage]
) -> Dict[str, Any]:
    payload = {
        "id": entry.question_id,
        "order": entry.order,
        "text": localized(entry.snapshot.get("text"), language),
        "image_url": entry.snapshot.get("image_url"),
        "options": options_payload(entry.options, language),
    }
    if visible_mode:
        payload["correct_option_index"] = entry.correct_option_index
        payload["explanation"] = localized(entry.snapshot.get("explanation"), language)
    return payload


def _session_header(session: ExamSession, language: Optional[AcceptLanguage]) -> Dict[str, Any]:
    return {
        "session_id": session.pk,
        "mode": session.mode,
        "package_id": session.package_id,
        "package_name": _name(session.package, language),
        "ticket_id": session.ticket_id,
        "ticket_number": session.ticket.ticket_number if session.ticket else None,
        "topic_id": session.topic_id,
        "topic_name": _name(session.topic, language),
        "status": session.status,
        "is_marathon_mode": session.is_marathon,
        "is_ticket_mode": session.is_ticket_mode,
    }


def session_payload(payload: SessionPayload, language: Optional[AcceptLanguage]) -> Dict[str, Any]:
    session = payload.session
    # Gate on the flag stored with the session, never on request input
    visible_mode = session.visible_mode
    data = _session_header(session, language)
    data.update(
        {
            "total_questions": session.total_questions,
            "duration_minutes": session.duration_minutes,
            "passing_score": session.passing_score,
            "started_at": session.started_at,
            "expires_at": session.expires_at,
            "is_visible_mode": visible_mode,
            "language": language.code if language else "all",
            "questions": [question_payload(entry, visible_mode, language) for entry in payload.questions],
        }
    )
    return data


def check_answer_payload(check: CheckAnswer, language: Optional[AcceptLanguage]) -> Dict[str, Any]:
    return {
        "question_id": check.question_id,
        "is_correct": check.is_correct,
        "correct_option_index": check.correct_option_index,
        "explanation": localized(check.explanation, language),
    }


def result_payload(exam_result: ExamResult, language: Optional[AcceptLanguage]) -> Dict[str, Any]:
    session, result = exam_result.session, exam_result.result
    data = _session_header(session, language)
    data.update(
        {
            "total_questions": result.total_questions,
            "answered_count": result.answered_count,
            "correct_count": result.correct_count,
            "incorrect_count": result.incorrect_count,
            "unanswered_count": result.unanswered_count,
            "score": result.score,
            "percentage": result.percentage,
            "is_passed": result.is_passed,
            "passing_score": result.passing_score,
            "started_at": session.started_at,
            "finished_at": session.finished_at,
            "duration_seconds": result.duration_seconds,
            "average_time_per_question": result.average_time_per_question,
            "answer_details": [
                {
                    "question_id": detail.question_id,
                    "question_order": detail.question_order,
                    "question_text": localized(detail.question_text, language),
                    "image_url": detail.image_url,
                    "options": options_payload(detail.options, language),
                    "selected_option_index": detail.selected_option_index,
                    "correct_option_index": detail.correct_option_index,
                    "is_correct": detail.is_correct,
                    "explanation": localized(detail.explanation, language),
                    "time_spent_seconds": detail.time_spent_seconds,
                }
                for detail in exam_result.answer_details
            ],
        }
    )
    return data


def statistics_payload(exam_statistics: ExamStatistics) -> Dict[str, Any]:
    statistics = exam_statistics.statistics
    result = statistics.result
    return {
        "session_id": exam_statistics.session.pk,
        "total_questions": result.total_questions,
        "answered_count": result.answered_count,
        "correct_count": result.correct_count,
        "incorrect_count": result.incorrect_count,
        "unanswered_count": result.unanswered_count,
        "score": result.score,
        "percentage": result.percentage,
        "is_passed": result.is_passed,
        "passing_score": result.passing_score,
        "duration_seconds": result.duration_seconds,
        "average_time_per_question": result.average_time_per_question,
        "fastest_answer_time": statistics.fastest_answer_time,
        "slowest_answer_time": statistics.slowest_answer_time,
        "correct_percentage": statistics.correct_percentage,
        "unanswered_percentage": statistics.unanswered_percentage,
        "is_marathon_mode": exam_statistics.session.is_marathon,
    }


def history_item_payload(session: ExamSession, language: Optional[AcceptLanguage]) -> Dict[str, Any]:
    data = _session_header(session, language)
    data.update(
        {
            "total_questions": session.total_questions,
            "correct_count": session.correct_count,
            "incorrect_count": session.incorrect_count,
            "unanswered_count": session.unanswered_count,
            "percentage": session.percentage,
            "is_passed": session.is_passed,
            "started_at": session.started_at,
            "finished_at": session.finished_at,
            "duration_seconds": session.duration_seconds,
        }
    )
    return data


def package_statistics_payload(
    package_result: PackageStatisticsResult, language: Optional[AcceptLanguage]
) -> Dict[str, Any]:
    package = package_result.package
    data = {
        "package_id": package.pk,
        "package_name": _name(package, language),
        "topic_id": package.topic_id,
        "topic_name": _name(package.topic, language),
        "total_questions_in_package": package.question_count,
        "passing_score": package.passing_score,
        "duration_minutes": package.duration_minutes,
    }
    data.update(package_result.statistics.to_dict())
    return data


def scoped_statistics_payload(
    scoped: ScopedStatisticsResult, language: Optional[AcceptLanguage]
) -> Dict[str, Any]:
    subject = scoped.subject
    data: Dict[str, Any] = {"scope": scoped.scope}
    if scoped.scope == "ticket":
        data.update(
            {
                "ticket_id": subject.pk,
                "ticket_number": subject.ticket_number,
                "ticket_name": _name(subject, language),
                "package_id": subject.package_id,
                "topic_id": subject.topic_id,
            }
        )
    elif scoped.scope == "topic":
        data.update({"topic_id": subject.pk, "topic_name": _name(subject, language)})
    data.update(scoped.statistics.to_dict())
    return data


def leaderboard_payload(leaderboard: Leaderboard, language: Optional[AcceptLanguage]) -> Dict[str, Any]:
    topic = leaderboard.topic
    return {
        "topic_id": topic.pk if topic else None,
        "topic_name": _name(topic, language),
        "entries": [asdict(entry) for entry in leaderboard.entries],
    }
