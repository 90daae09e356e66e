"""
Driving Exam Application Configuration

This module contains the Django application configuration for the driving-exam
engine. It defines the application's metadata and default field configuration.

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class DrivingExamConfig(AppConfig):
    """
    Configuration class for the driving exam Django application.

    Attributes:
        default_auto_field: Default primary key field type for models
        name: Application name for Django registration
        verbose_name: Human-readable application name for admin interface
    """

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "driving_exam"
    verbose_name: str = "Driving Exam Practice"
