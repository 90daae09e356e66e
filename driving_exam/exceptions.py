"""
Exam Engine Custom Exceptions

This module provides the exception classes raised by the exam session and
scoring engine. They follow a hierarchical structure so that callers can
handle a whole family of failures at once (for example every
``ExamEngineException``) or react to a single condition.

Every exception carries the HTTP status it maps to and a stable error code,
and ``exam_exception_handler`` renders them for Django REST Framework.

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Dict, Optional

from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ExamEngineException(Exception):
    """
    Base exception class for all exam engine errors.

    Attributes:
        message (str): Human-readable error message
        status_code (Optional[int]): HTTP status code the error maps to
        error_code (Optional[str]): Stable machine-readable error identifier
        details (Optional[Dict[str, Any]]): Additional error details

    Example:
        >>> try:
        ...     service.finish_exam(user, session_id)
        ... except ExamEngineException as e:
        ...     logger.error(f"Exam engine error: {e.message}")
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Initialize an exam engine exception.

        Args:
            message: Human-readable error description
            status_code: HTTP status code the error maps to
            error_code: Stable error identifier
            details: Additional context or error details
        """
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            'message': self.message,
            'status_code': self.status_code,
            'error_code': self.error_code,
            'details': self.details,
            'exception_type': self.__class__.__name__
        }


class InvalidExamRequest(ExamEngineException):
    """
    Raised when a start or submit request violates the engine's rules.

    Covers a missing or ambiguous exam mode, question counts, durations or
    passing scores outside the configured limits, a candidate pool smaller
    than the requested count, negative answer times and option indices that
    do not exist on the question.
    """

    def __init__(
        self,
        message: str = "Invalid exam request",
        field: Optional[str] = None,
        **details: Any
    ) -> None:
        if field:
            details['field'] = field
        super().__init__(
            message=message,
            status_code=400,
            error_code="InvalidExamRequest",
            details=details
        )


class SessionNotFound(ExamEngineException):
    """
    Raised when a session does not exist or belongs to another user.

    The two cases are deliberately indistinguishable to the caller.
    """

    def __init__(self, session_id: Optional[int] = None, message: str = "Exam session not found") -> None:
        details = {}
        if session_id is not None:
            details['session_id'] = session_id
        super().__init__(
            message=message,
            status_code=404,
            error_code="SessionNotFound",
            details=details
        )


class SessionClosed(ExamEngineException):
    """
    Raised when a mutation targets a session in a terminal state.

    Attributes:
        session_status (Optional[str]): The status the session was found in
    """

    def __init__(
        self,
        session_id: Optional[int] = None,
        session_status: Optional[str] = None,
        message: str = "Exam session is already closed"
    ) -> None:
        self.session_status = session_status
        details: Dict[str, Any] = {}
        if session_id is not None:
            details['session_id'] = session_id
        if session_status:
            details['status'] = session_status
        super().__init__(
            message=message,
            status_code=409,
            error_code="SessionClosed",
            details=details
        )


class SessionNotFinished(ExamEngineException):
    """Raised when results are requested for a session that is still open."""

    def __init__(
        self,
        session_id: Optional[int] = None,
        session_status: Optional[str] = None,
        message: str = "Exam session has not been finished yet"
    ) -> None:
        details: Dict[str, Any] = {}
        if session_id is not None:
            details['session_id'] = session_id
        if session_status:
            details['status'] = session_status
        super().__init__(
            message=message,
            status_code=409,
            error_code="SessionNotFinished",
            details=details
        )


class QuestionNotInSession(ExamEngineException):
    """Raised when an answer references a question outside the session's frozen set."""

    def __init__(
        self,
        session_id: Optional[int] = None,
        question_id: Optional[int] = None,
        message: str = "Question does not belong to this exam session"
    ) -> None:
        details = {}
        if session_id is not None:
            details['session_id'] = session_id
        if question_id is not None:
            details['question_id'] = question_id
        super().__init__(
            message=message,
            status_code=400,
            error_code="QuestionNotInSession",
            details=details
        )


class ContentUnavailable(ExamEngineException):
    """
    Raised when the content catalog or the cache cannot serve a request.

    The original failure is kept on ``__cause__``.
    """

    def __init__(
        self,
        message: str = "Exam content is temporarily unavailable",
        status_code: int = 503,
        error_code: str = "ContentUnavailable",
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details
        )


class ContentNotFound(ContentUnavailable):
    """
    Raised when a ticket, package or topic is missing or inactive.

    Attributes:
        resource (Optional[str]): The kind of content that was requested
    """

    def __init__(
        self,
        resource: Optional[str] = None,
        resource_id: Optional[int] = None,
        message: Optional[str] = None
    ) -> None:
        self.resource = resource
        details: Dict[str, Any] = {}
        if resource:
            details['resource'] = resource
        if resource_id is not None:
            details['resource_id'] = resource_id
        super().__init__(
            message=message or f"{(resource or 'Content').capitalize()} not found",
            status_code=404,
            error_code="ContentNotFound",
            details=details
        )


def exam_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """
    DRF exception handler that renders exam engine errors.

    Anything that is not an ``ExamEngineException`` is handed to DRF's
    default handler, so request validation and authentication errors keep
    their usual shape.

    Args:
        exc: The raised exception
        context: DRF handler context (view, request, args, kwargs)

    Returns:
        A Response, or None to let Django turn the error into a 500
    """
    if isinstance(exc, ExamEngineException):
        status_code = exc.status_code or 500
        view = context.get('view')
        view_name = view.__class__.__name__ if view is not None else 'unknown'
        if status_code >= 500:
            logger.error(f"{view_name}: {exc.__class__.__name__}: {exc.message}", exc_info=exc)
        else:
            logger.info(f"{view_name}: {exc.__class__.__name__}: {exc.message}")
        return Response(exc.to_dict(), status=status_code)

    return exception_handler(exc, context)
