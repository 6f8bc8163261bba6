import logging
from pathlib import Path

from celery import shared_task
from django.conf import settings

from .config import WorkflowConfig
from .exceptions import JobFailedError
from .models import EncodingRun
from .naming import RunNames
from .workflow import run_encoding_workflow

logger = logging.getLogger(__name__)

ERROR_MAX_CHARS = 4000


def _update(run: EncodingRun, *, status=None, progress=None, job_state=None, error=None, outputs=None):
    if status:
        run.status = status
    if progress is not None:
        run.progress = max(0, min(100, int(progress)))
    if job_state is not None:
        run.job_state = job_state
    if error is not None:
        run.error = error[:ERROR_MAX_CHARS]
    if outputs is not None:
        run.outputs = outputs
    run.save(update_fields=["status", "progress", "job_state", "error", "outputs", "updated_at"])


def _describe_outputs(result) -> list[dict]:
    outputs = [{"path": str(p)} for p in result.files]
    # publish mode: pair local files with the published URLs they came from
    for out, url in zip(outputs, result.published_urls):
        out["url"] = url
    return outputs


@shared_task(bind=True)
def process_encoding(self, run_pk: str):
    run = EncodingRun.objects.get(pk=run_pk)
    names = RunNames.generate()
    run.run_id = names.run_id
    run.save(update_fields=["run_id", "updated_at"])
    _update(run, status=EncodingRun.Status.STARTED, progress=0)

    source = Path(settings.MEDIA_ROOT) / run.input_path

    try:
        config = WorkflowConfig.from_settings()
        result = run_encoding_workflow(
            config,
            source,
            names=names,
            on_progress=lambda p: _update(run, progress=p),
        )
        _update(
            run,
            status=EncodingRun.Status.SUCCESS,
            progress=100,
            job_state=result.job_state,
            outputs=_describe_outputs(result),
        )
    except JobFailedError as e:
        _update(run, status=EncodingRun.Status.FAILURE, job_state=str(e.state), error=str(e), progress=100)
        raise
    except Exception as e:
        logger.exception("Encoding run %s failed", run_pk)
        _update(run, status=EncodingRun.Status.FAILURE, error=f"{type(e).__name__}: {e}", progress=100)
        raise
