from rest_framework import status, views
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .models import EncodingRun
from .serializers import EncodingRunSerializer, UploadCreateSerializer
from .tasks import process_encoding
from .utils import store_upload


class UploadAndCreateRunView(views.APIView):
    """
    Accepts a video upload, stores it under MEDIA_ROOT, creates an
    EncodingRun and enqueues the encoding task.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        ser = UploadCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        rel_path = store_upload(ser.validated_data["file"])
        run = EncodingRun.objects.create(input_path=rel_path)

        process_encoding.delay(str(run.id))
        return Response({"id": str(run.id)}, status=status.HTTP_202_ACCEPTED)


class RunDetailView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, run_pk):
        try:
            run = EncodingRun.objects.get(pk=run_pk)
        except EncodingRun.DoesNotExist:
            return Response({"detail": "Not found"}, status=404)

        return Response(EncodingRunSerializer(run).data)
