"""
Driving Exam Application URL Configuration

This module defines the URL routing of the exam engine API. It is mounted
under ``/api/exams/`` by ``backend/urls.py``.

URL Structure:
- start/: Start a ticket, package or marathon exam
- sessions/...: Work with one session (answers, finish, results)
- history/: Paginated session history of the current user
- packages/, tickets/, topics/<id>/statistics/ and marathon/statistics/: Rollups for
  the current user
- leaderboard/: Global or per-topic ranking

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

from typing import List

from django.urls import URLPattern, include, path

from .exams import views as exam_views

app_name = 'driving_exam'

# --- Session URL Patterns ---

sessions_urlpatterns: List[URLPattern] = [
    # Must precede <int:session_id>/ lookups
    path('active/', exam_views.ActiveSessionView.as_view(), name='session-active'),

    # Session lifecycle
    path('<int:session_id>/', exam_views.ExamSessionDetailView.as_view(), name='session-detail'),
    path('<int:session_id>/answers/', exam_views.SubmitAnswerView.as_view(), name='session-answer'),
    path('<int:session_id>/submit/', exam_views.SubmitAllAnswersView.as_view(), name='session-submit'),
    path('<int:session_id>/finish/', exam_views.FinishExamView.as_view(), name='session-finish'),
    path('<int:session_id>/abandon/', exam_views.AbandonExamView.as_view(), name='session-abandon'),

    # Results (closed sessions only)
    path('<int:session_id>/result/', exam_views.ExamResultView.as_view(), name='session-result'),
    path('<int:session_id>/statistics/', exam_views.ExamStatisticsView.as_view(), name='session-statistics'),
]

# --- Main URL Patterns ---

urlpatterns: List[URLPattern] = [
    path('start/', exam_views.StartExamView.as_view(), name='exam-start'),
    path('sessions/', include(sessions_urlpatterns)),
    path('history/', exam_views.ExamHistoryView.as_view(), name='exam-history'),

    # Statistics rollups of the current user
    path(
        'packages/<int:package_id>/statistics/',
        exam_views.PackageStatisticsView.as_view(),
        name='package-statistics',
    ),
    path('tickets/<int:ticket_id>/statistics/', exam_views.TicketStatisticsView.as_view(), name='ticket-statistics'),
    path('topics/<int:topic_id>/statistics/', exam_views.TopicStatisticsView.as_view(), name='topic-statistics'),
    path('marathon/statistics/', exam_views.MarathonStatisticsView.as_view(), name='marathon-statistics'),

    # Rankings across users
    path('leaderboard/', exam_views.LeaderboardView.as_view(), name='leaderboard'),
]
