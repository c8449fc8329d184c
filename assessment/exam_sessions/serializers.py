from rest_framework import serializers

from .models import TestSession


class TestSessionSerializer(serializers.ModelSerializer):
    """
    Session state as seen by its student.

    ``result`` is only filled for completed sessions and needs the engine's
    lifecycle manager in the serializer context under ``"lifecycle"``.
    """

    status = serializers.CharField(read_only=True)
    test_title = serializers.CharField(source="test.title", read_only=True)
    result = serializers.SerializerMethodField()

    class Meta:
        model = TestSession
        fields = [
            "id",
            "student",
            "test",
            "test_title",
            "status",
            "started_at",
            "ended_at",
            "score",
            "end_reason",
            "result",
        ]
        read_only_fields = fields

    def get_result(self, obj):
        lifecycle = self.context.get("lifecycle")
        if lifecycle is None:
            return None
        result = lifecycle.result(obj)
        return result.to_dict() if result else None


class SelectedOptionSerializer(serializers.Serializer):
    selected_option = serializers.CharField(max_length=500, trim_whitespace=False)


class AnswerNavigationSerializer(SelectedOptionSerializer):
    question_id = serializers.IntegerField(min_value=1)


class PreviousNavigationSerializer(serializers.Serializer):
    question_id = serializers.IntegerField(min_value=1)
    selected_option = serializers.CharField(
        max_length=500, trim_whitespace=False, required=False, allow_null=True
    )


class CloseSessionsSerializer(serializers.Serializer):
    close_all = serializers.BooleanField(default=False)
    dry_run = serializers.BooleanField(default=False)
