"""
Driving Exam Services Package

Business logic of the exam session and scoring engine.

Structure:
- content_catalog.py: Cached read-only access to questions, tickets, packages, topics
- session_builder.py: Start-request validation and question selection
- answer_evaluator.py: Grading and the session state machine
- result_aggregator.py: Per-session scoring and statistics (pure)
- package_statistics.py: Package-level rollups (pure)
- session_repository.py: Session persistence
- session_locks.py: Per-session serialization of mutations
- exam_service.py: Operations used by the views and management commands

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

from .exam_service import ExamService
from .session_builder import StartExamRequest

__all__ = ["ExamService", "StartExamRequest"]
