from rest_framework import generics
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response
from rest_framework.views import APIView

from .. import responses
from ..serializers import ExamHistoryFilterSerializer, LeaderboardFilterSerializer
from .base import ExamServiceMixin


class ExamResultView(ExamServiceMixin, APIView):
    """Full result of a closed session, with every answer disclosed."""

    def get(self, request, session_id):
        result = self.get_service().get_result(request.user, session_id)
        return Response(responses.result_payload(result, self.get_language()))


class ExamStatisticsView(ExamServiceMixin, APIView):
    def get(self, request, session_id):
        statistics = self.get_service().get_statistics(request.user, session_id)
        return Response(responses.statistics_payload(statistics))


class ExamHistoryPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


class ExamHistoryView(ExamServiceMixin, generics.ListAPIView):
    """
    The user's exam sessions, newest first.

    Query parameters: ``status``, ``mode``, ``package_id``, ``page``,
    ``page_size``.
    """

    pagination_class = ExamHistoryPagination

    def get_queryset(self):
        filters = ExamHistoryFilterSerializer(data=self.request.query_params)
        filters.is_valid(raise_exception=True)
        return self.get_service().get_exam_history(self.request.user, **filters.validated_data)

    def list(self, request, *args, **kwargs):
        language = self.get_language()
        page = self.paginate_queryset(self.get_queryset())
        items = [responses.history_item_payload(session, language) for session in page]
        return self.get_paginated_response(items)


class PackageStatisticsView(ExamServiceMixin, APIView):
    def get(self, request, package_id):
        package_result = self.get_service().get_package_statistics(request.user, package_id)
        return Response(responses.package_statistics_payload(package_result, self.get_language()))


class TicketStatisticsView(ExamServiceMixin, APIView):
    def get(self, request, ticket_id):
        scoped = self.get_service().get_ticket_statistics(request.user, ticket_id)
        return Response(responses.scoped_statistics_payload(scoped, self.get_language()))


class TopicStatisticsView(ExamServiceMixin, APIView):
    def get(self, request, topic_id):
        scoped = self.get_service().get_topic_statistics(request.user, topic_id)
        return Response(responses.scoped_statistics_payload(scoped, self.get_language()))


class MarathonStatisticsView(ExamServiceMixin, APIView):
    def get(self, request):
        scoped = self.get_service().get_marathon_statistics(request.user)
        return Response(responses.scoped_statistics_payload(scoped, self.get_language()))


class LeaderboardView(ExamServiceMixin, APIView):
    """
    Users ranked by their best closed session.

    Query parameters: ``topic_id`` (omit for the global board), ``limit``.
    """

    def get(self, request):
        filters = LeaderboardFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        leaderboard = self.get_service().get_leaderboard(**filters.validated_data)
        return Response(responses.leaderboard_payload(leaderboard, self.get_language()))
