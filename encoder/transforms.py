import logging

from azure.mgmt.media.models import (
    AacAudio,
    AacAudioProfile,
    H264Complexity,
    H264Layer,
    H264Video,
    Mp4Format,
    OnErrorType,
    Priority,
    StandardEncoderPreset,
    Transform,
    TransformOutput,
)

from .azure_clients import MediaAccount

logger = logging.getLogger(__name__)

OUTPUT_FILENAME_PATTERN = "Video-{Basename}-{Label}-{Bitrate}{Extension}"
TRANSFORM_DESCRIPTION = "Post video transform"


def build_transform(video_bitrate: int = 1_200_000) -> Transform:
    """Single-output preset: AAC stereo + one 720p/30fps H.264 layer, muxed to MP4."""
    preset = StandardEncoderPreset(
        codecs=[
            AacAudio(
                channels=2,
                sampling_rate=48000,
                bitrate=128000,
                profile=AacAudioProfile.AAC_LC,
            ),
            H264Video(
                complexity=H264Complexity.SPEED,
                layers=[
                    H264Layer(
                        bitrate=video_bitrate,
                        width="1280",
                        height="720",
                        label="720p",
                        frame_rate="30",
                    )
                ],
            ),
        ],
        formats=[Mp4Format(filename_pattern=OUTPUT_FILENAME_PATTERN)],
    )
    return Transform(
        description=TRANSFORM_DESCRIPTION,
        outputs=[
            TransformOutput(
                preset=preset,
                on_error=OnErrorType.STOP_PROCESSING_JOB,
                relative_priority=Priority.NORMAL,
            )
        ],
    )


def provision_transform(account: MediaAccount, transform_name: str, video_bitrate: int = 1_200_000) -> Transform:
    """Create or update the named transform. Re-running with the same name updates it in place."""
    logger.info("Creating transform %s", transform_name)
    return account.client.transforms.create_or_update(
        *account.scope,
        transform_name,
        build_transform(video_bitrate),
    )
