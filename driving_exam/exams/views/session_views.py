from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .. import responses
from ..serializers import StartExamSerializer, SubmitAllAnswersSerializer, SubmitAnswerSerializer
from .base import ExamServiceMixin


class StartExamView(ExamServiceMixin, APIView):
    """Start a ticket, package or marathon exam."""

    def post(self, request):
        serializer = StartExamSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        payload = self.get_service().start_exam(request.user, serializer.to_request())
        return Response(
            responses.session_payload(payload, self.get_language()),
            status=status.HTTP_201_CREATED,
        )


class ExamSessionDetailView(ExamServiceMixin, APIView):
    """Re-fetch a session; answers stay hidden unless it was started in visible mode."""

    def get(self, request, session_id):
        payload = self.get_service().get_session(request.user, session_id)
        return Response(responses.session_payload(payload, self.get_language()))


class ActiveSessionView(ExamServiceMixin, APIView):
    def get(self, request):
        payload = self.get_service().get_active_session(request.user)
        if payload is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(responses.session_payload(payload, self.get_language()))


class SubmitAnswerView(ExamServiceMixin, APIView):
    def post(self, request, session_id):
        serializer = SubmitAnswerSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        check = self.get_service().submit_answer(
            request.user,
            session_id,
            question_id=data["question_id"],
            selected_option_index=data.get("selected_option_index"),
            time_spent_seconds=data.get("time_spent_seconds", 0),
        )
        return Response(responses.check_answer_payload(check, self.get_language()))


class SubmitAllAnswersView(ExamServiceMixin, APIView):
    """Record every answer at once and finish the exam."""

    def post(self, request, session_id):
        serializer = SubmitAllAnswersSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self.get_service().submit_all(
            request.user, session_id, serializer.validated_data["answers"]
        )
        return Response(responses.result_payload(result, self.get_language()))


class FinishExamView(ExamServiceMixin, APIView):
    def post(self, request, session_id):
        result = self.get_service().finish_exam(request.user, session_id)
        return Response(responses.result_payload(result, self.get_language()))


class AbandonExamView(ExamServiceMixin, APIView):
    def post(self, request, session_id):
        session = self.get_service().abandon_exam(request.user, session_id)
        return Response({"session_id": session.pk, "status": session.status})
