"""
Exam content models: topics, packages, tickets, questions and their options.

Content is managed outside the engine; the engine only reads it through
``driving_exam.services.content_catalog``.
"""
