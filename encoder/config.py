from dataclasses import dataclass, replace
from pathlib import Path

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

EXPORT_MODES = ("download", "publish")


@dataclass(frozen=True)
class WorkflowConfig:
    """
    Everything one encoding run needs to know about its environment.

    Built from Django settings (which read env / .env) and validated once,
    before any remote call is made.
    """
    subscription_id: str
    resource_group: str
    account_name: str
    output_dir: Path
    interactive_login: bool = False
    video_bitrate: int = 1_200_000
    sas_expiry_minutes: int = 60
    poll_interval: float = 1.0
    poll_max_seconds: float | None = None
    poll_max_attempts: int | None = None
    export_mode: str = "download"
    publish_container_url: str = ""
    publish_prefix: str = "published"
    http_timeout: int = 60

    @classmethod
    def from_settings(cls, **overrides) -> "WorkflowConfig":
        config = cls(
            subscription_id=settings.AZURE_SUBSCRIPTION_ID,
            resource_group=settings.AZURE_RESOURCE_GROUP,
            account_name=settings.AZURE_MEDIA_SERVICES_ACCOUNT_NAME,
            interactive_login=settings.AZURE_INTERACTIVE_LOGIN,
            output_dir=Path(settings.ENCODER_OUTPUT_DIR),
            video_bitrate=settings.ENCODER_VIDEO_BITRATE,
            sas_expiry_minutes=settings.ENCODER_SAS_EXPIRY_MINUTES,
            poll_interval=settings.ENCODER_POLL_INTERVAL_SECONDS,
            poll_max_seconds=settings.ENCODER_POLL_MAX_SECONDS,
            poll_max_attempts=settings.ENCODER_POLL_MAX_ATTEMPTS,
            export_mode=settings.ENCODER_EXPORT_MODE,
            publish_container_url=settings.ENCODER_PUBLISH_CONTAINER_URL,
            publish_prefix=settings.ENCODER_PUBLISH_PREFIX,
            http_timeout=settings.ENCODER_HTTP_TIMEOUT_SECONDS,
        )
        # CLI flags arrive as None when not given
        overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(config, **overrides) if overrides else config

    def validate(self) -> "WorkflowConfig":
        missing = [
            name
            for name, value in (
                ("AZURE_SUBSCRIPTION_ID", self.subscription_id),
                ("AZURE_RESOURCE_GROUP", self.resource_group),
                ("AZURE_MEDIA_SERVICES_ACCOUNT_NAME", self.account_name),
            )
            if not value or not str(value).strip()
        ]
        if missing:
            raise ImproperlyConfigured(f"Missing required setting(s): {', '.join(missing)}")

        if self.export_mode not in EXPORT_MODES:
            raise ImproperlyConfigured(
                f"ENCODER_EXPORT_MODE must be one of {EXPORT_MODES}, got {self.export_mode!r}"
            )
        if self.export_mode == "publish" and not self.publish_container_url:
            raise ImproperlyConfigured("ENCODER_PUBLISH_CONTAINER_URL is required when ENCODER_EXPORT_MODE=publish")

        if self.video_bitrate <= 0:
            raise ImproperlyConfigured("ENCODER_VIDEO_BITRATE must be positive")
        if self.sas_expiry_minutes <= 0:
            raise ImproperlyConfigured("ENCODER_SAS_EXPIRY_MINUTES must be positive")
        if self.poll_interval <= 0:
            raise ImproperlyConfigured("ENCODER_POLL_INTERVAL_SECONDS must be positive")
        if self.poll_max_seconds is not None and self.poll_max_seconds <= 0:
            raise ImproperlyConfigured("ENCODER_POLL_MAX_SECONDS must be positive when set")
        if self.poll_max_attempts is not None and self.poll_max_attempts <= 0:
            raise ImproperlyConfigured("ENCODER_POLL_MAX_ATTEMPTS must be positive when set")
        return self
