from rest_framework import serializers

from ..services.session_builder import StartExamRequest
from .models import ExamMode, ExamStatus


class StartExamSerializer(serializers.Serializer):
    """
    Body of ``POST start/``.

    Exactly one of ``ticket_id``, ``package_id`` or ``marathon`` selects the
    mode; range checks happen in the engine so they share its error format.
    """

    ticket_id = serializers.IntegerField(required=False, allow_null=True)
    package_id = serializers.IntegerField(required=False, allow_null=True)
    marathon = serializers.BooleanField(required=False, default=False)
    question_count = serializers.IntegerField(required=False, allow_null=True)
    topic_id = serializers.IntegerField(required=False, allow_null=True)
    duration_minutes = serializers.IntegerField(required=False, allow_null=True)
    passing_score = serializers.IntegerField(required=False, allow_null=True)
    visible_mode = serializers.BooleanField(required=False, default=False)

    def to_request(self) -> StartExamRequest:
        data = self.validated_data
        return StartExamRequest(
            ticket_id=data.get("ticket_id"),
            package_id=data.get("package_id"),
            marathon=data.get("marathon", False),
            question_count=data.get("question_count"),
            topic_id=data.get("topic_id"),
            duration_minutes=data.get("duration_minutes"),
            passing_score=data.get("passing_score"),
            visible_mode=data.get("visible_mode", False),
        )


class SubmitAnswerSerializer(serializers.Serializer):
    question_id = serializers.IntegerField()
    selected_option_index = serializers.IntegerField(required=False, allow_null=True, default=None)
    time_spent_seconds = serializers.IntegerField(required=False, default=0)


class SubmitAllAnswersSerializer(serializers.Serializer):
    answers = SubmitAnswerSerializer(many=True, allow_empty=True)


class ExamHistoryFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ExamStatus.choices, required=False)
    mode = serializers.ChoiceField(choices=ExamMode.choices, required=False)
    package_id = serializers.IntegerField(required=False, min_value=1)


class LeaderboardFilterSerializer(serializers.Serializer):
    topic_id = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, min_value=1)
