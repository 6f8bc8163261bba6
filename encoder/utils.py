import mimetypes
import os
from uuid import uuid4

from django.conf import settings


def store_upload(djangofile) -> str:
    """
    Save to MEDIA_ROOT/uploads/<uuid>/<original name> and return the path
    relative to MEDIA_ROOT.

    The original base name is kept because it becomes the blob name in the
    input asset, and from there the {Basename} of every encoded output.
    """
    upload_dir = settings.MEDIA_ROOT / "uploads" / uuid4().hex
    upload_dir.mkdir(parents=True, exist_ok=True)
    dest = upload_dir / os.path.basename(djangofile.name)
    with open(dest, "wb") as f:
        for chunk in djangofile.chunks():
            f.write(chunk)
    return str(dest.relative_to(settings.MEDIA_ROOT))


def is_video(name: str) -> bool:
    mime, _ = mimetypes.guess_type(name)
    return bool(mime) and mime.startswith("video/")
