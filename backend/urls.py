"""
Project URL Configuration

Routes:
- /api/token/: JWT token management (obtain, refresh, verify)
- /api/exams/: Exam session and scoring engine
"""

from django.urls import include, path
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView, TokenVerifyView

urlpatterns = [
    # Authentication and Token Management
    path("api/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/token/verify/", TokenVerifyView.as_view(), name="token_verify"),

    # Exam engine
    path("api/exams/", include("driving_exam.urls")),
]
