from rest_framework import serializers

from .models import EncodingRun
from .utils import is_video


class EncodingRunSerializer(serializers.ModelSerializer):
    class Meta:
        model = EncodingRun
        fields = [
            "id",
            "run_id",
            "status",
            "progress",
            "job_state",
            "outputs",
            "error",
            "created_at",
            "updated_at",
        ]


class UploadCreateSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, value):
        if not is_video(value.name):
            raise serializers.ValidationError("Only video files can be encoded.")
        return value
