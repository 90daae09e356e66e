"""
Driving Exam Application Models Registry

This module serves as the central models registry for the driving exam
application. It imports and exposes all models from the logical submodules
(content, exams) so they are registered with Django's ORM under the single
``driving_exam`` app label.

Architecture:
- content/: Topics, packages, tickets, questions and options (read-only for the engine)
- exams/: Exam sessions, their frozen question sets and recorded answers

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

# Import all content models for registration with Django ORM
from .content.models import *

# Import all exam session models for registration with Django ORM
from .exams.models import *
