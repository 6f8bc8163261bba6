import signal
import threading
from pathlib import Path

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from encoder.config import EXPORT_MODES, WorkflowConfig
from encoder.exceptions import EncoderError
from encoder.workflow import run_encoding_workflow


class Command(BaseCommand):
    help = "Upload a video, encode it to 720p MP4 with Azure Media Services and fetch the result."

    def add_arguments(self, parser):
        parser.add_argument(
            "source",
            nargs="?",
            help="Video to encode (default: ENCODER_INPUT_FILE)",
        )
        parser.add_argument("--output-dir", type=Path, help="Where results are written (default: ENCODER_OUTPUT_DIR)")
        parser.add_argument("--export-mode", choices=EXPORT_MODES)
        parser.add_argument("--poll-interval", type=float, help="Seconds between job status checks")
        parser.add_argument("--poll-timeout", type=float, help="Give up waiting for the job after this many seconds")
        parser.add_argument("--poll-max-attempts", type=int, help="Give up after this many status checks")

    def handle(self, *args, **options):
        source = Path(options["source"] or settings.ENCODER_INPUT_FILE)

        try:
            config = WorkflowConfig.from_settings(
                output_dir=options["output_dir"],
                export_mode=options["export_mode"],
                poll_interval=options["poll_interval"],
                poll_max_seconds=options["poll_timeout"],
                poll_max_attempts=options["poll_max_attempts"],
            ).validate()
        except ImproperlyConfigured as e:
            raise CommandError(str(e))

        # SIGTERM stops the poll; teardown still runs before we exit.
        # Handlers can only be installed from the main thread.
        cancel = threading.Event()
        on_main_thread = threading.current_thread() is threading.main_thread()
        if on_main_thread:
            previous = signal.signal(signal.SIGTERM, lambda signum, frame: cancel.set())

        self.stdout.write(f"Encoding {source}")
        try:
            result = run_encoding_workflow(
                config,
                source,
                cancel_event=cancel,
                on_progress=lambda p: self.stdout.write(f"Progress: {p}%"),
            )
        except (EncoderError, FileNotFoundError) as e:
            raise CommandError(str(e))
        finally:
            if on_main_thread:
                signal.signal(signal.SIGTERM, previous)

        for path in result.files:
            self.stdout.write(str(path))
        self.stdout.write(self.style.SUCCESS(
            f"Run {result.names.run_id} finished: {len(result.files)} file(s) in {config.output_dir}"
        ))
