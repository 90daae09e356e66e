from typing import Optional

from rest_framework import permissions

from ...localization import AcceptLanguage, resolve_language
from ...services import ExamService

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ExamServiceMixin:
    """Shared plumbing of the exam views: auth, locale and the engine service."""

    permission_classes = [permissions.IsAuthenticated]
    service_class = ExamService

    def get_service(self) -> ExamService:
        return self.service_class()

    def get_language(self) -> Optional[AcceptLanguage]:
        """
        Locale for localized fields, from the ``Accept-Language`` header.

        Returns None when ``?all_languages=true`` asks for all four locales.
        """
        all_languages = self.request.query_params.get("all_languages", "")
        if all_languages.strip().lower() in _TRUE_VALUES:
            return None
        return resolve_language(self.request.headers.get("Accept-Language"))
