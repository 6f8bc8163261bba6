import uuid
from django.db import models


class EncodingRun(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING"
        STARTED = "STARTED"
        SUCCESS = "SUCCESS"
        FAILURE = "FAILURE"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    input_path = models.CharField(max_length=512)     # relative to MEDIA_ROOT
    run_id = models.CharField(max_length=32, blank=True, default="")   # names the remote resources
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    progress = models.PositiveSmallIntegerField(default=0)  # 0..100, slowest job output
    job_state = models.CharField(max_length=16, blank=True, default="")
    outputs = models.JSONField(default=list, blank=True)    # [{path, url?}]
    error = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
