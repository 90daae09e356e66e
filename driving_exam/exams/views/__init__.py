"""
Driving Exam Views Package

This package contains the REST views of the exam engine. The views only
parse requests, resolve the locale and map service results to JSON; all
rules live in ``driving_exam.services``.

Features:
- Session views: start, re-fetch, answer, bulk submit, finish, abandon
- Statistics views: session result and statistics, history, package, ticket,
  topic and marathon rollups, leaderboard
- Locale from the Accept-Language header, or all four with ?all_languages=true

Author: Prava Imtihon Development Team
Version: 1.0.0
"""

from .session_views import *
from .statistics_views import *
