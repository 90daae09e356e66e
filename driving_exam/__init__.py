"""
Driving Exam Package - Prava Imtihon

This package contains the exam session and scoring engine of the driving-exam
practice platform. Learners take ticket, package or marathon tests in four
languages, answers are graded per question and finished sessions are rolled up
into per-package statistics.

Features:
- Ticket, package and marathon session assembly with a frozen question set
- Visible (practice) and secure (exam) disclosure modes
- Per-question grading with lazy expiry and a guarded session lifecycle
- Session results, session statistics and package-level rollups
- Four-locale texts (Uzbek Latin, Uzbek Cyrillic, English, Russian)

Structure:
- content/: Topics, packages, tickets, questions and options
- exams/: Exam sessions, answer records, serializers, response contracts, views
- services/: Catalog, session builder, evaluator, aggregators, exam service
- management/: Django management commands

Author: Prava Imtihon Development Team
Version: 1.0.0
"""
