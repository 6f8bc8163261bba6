from pathlib import Path
import os
from dotenv import load_dotenv
from django.core.exceptions import ImproperlyConfigured

# -----------------------------------------------------
# Helpers
# -----------------------------------------------------
def env(name: str, default=None, *, required: bool = False):
    val = os.getenv(name, default)
    if required and (val is None or (isinstance(val, str) and val.strip() == "")):
        raise ImproperlyConfigured(f"Missing required environment variable: {name}")
    return val

def env_bool(name: str, default: bool = False) -> bool:
    return str(os.getenv(name, str(default))).lower() in {"1", "true", "yes", "on"}

def env_int_or_none(name: str) -> int | None:
    val = os.getenv(name, "").strip()
    if not val:
        return None
    try:
        return int(val)
    except ValueError:
        raise ImproperlyConfigured(f"Environment variable {name} must be an integer, got {val!r}")

# -----------------------------------------------------
# Paths & basics
# -----------------------------------------------------
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")

DEBUG = env_bool("DEBUG", False)

# In production (DEBUG=False) you must set a strong secret in .env
SECRET_KEY = env("DJANGO_SECRET_KEY", "dev-only-secret-key-change-me", required=not DEBUG)

# Keep hosts explicit by default
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost").split(",") if h.strip()]

# -----------------------------------------------------
# Applications
# -----------------------------------------------------
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",

    # Third-party
    "rest_framework",

    # Local
    "encoder",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "encoding_pipeline.urls"

WSGI_APPLICATION = "encoding_pipeline.wsgi.application"

# -----------------------------------------------------
# Database (Postgres if DB_* env vars set, else SQLite)
# -----------------------------------------------------
if os.getenv("DB_HOST"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": env("DB_NAME", "encoding_pipeline"),
            "USER": env("DB_USER", "encoder"),
            "PASSWORD": env("DB_PASSWORD", ""),
            "HOST": env("DB_HOST", "127.0.0.1"),
            "PORT": env("DB_PORT", "5432"),
            "CONN_MAX_AGE": int(env("DB_CONN_MAX_AGE", "60")),  # keep-alive
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

# -----------------------------------------------------
# Internationalization
# -----------------------------------------------------
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# -----------------------------------------------------
# Static & Media
# -----------------------------------------------------
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = Path(env("MEDIA_ROOT", str(BASE_DIR / "media")))

# -----------------------------------------------------
# Django REST Framework
# -----------------------------------------------------
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
        "rest_framework.parsers.FormParser",
        "rest_framework.parsers.MultiPartParser",
    ],
    "UNAUTHENTICATED_USER": None,
}

# -----------------------------------------------------
# Logging
# -----------------------------------------------------
LOG_LEVEL = env("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "status": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "status"},
    },
    "loggers": {
        "encoder": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": True},
        # the Azure SDK logs every HTTP request at INFO
        "azure": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}

# -----------------------------------------------------
# Celery / Redis
# -----------------------------------------------------
CELERY_BROKER_URL = env("CELERY_BROKER_URL", "redis://127.0.0.1:6379/0")
CELERY_RESULT_BACKEND = env("CELERY_RESULT_BACKEND", "redis://127.0.0.1:6379/0")
CELERY_TASK_TRACK_STARTED = True
CELERY_TASK_TIME_LIMIT = int(env("CELERY_TASK_TIME_LIMIT", str(60 * 60 * 2)))  # seconds
# SoftTimeLimitExceeded is raised inside the task; teardown runs before the hard kill
CELERY_TASK_SOFT_TIME_LIMIT = int(env("CELERY_TASK_SOFT_TIME_LIMIT", str(CELERY_TASK_TIME_LIMIT - 300)))
if not 0 < CELERY_TASK_SOFT_TIME_LIMIT < CELERY_TASK_TIME_LIMIT:
    raise ImproperlyConfigured("CELERY_TASK_SOFT_TIME_LIMIT must be positive and below CELERY_TASK_TIME_LIMIT")

# -----------------------------------------------------
# Default PK type
# -----------------------------------------------------
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# -----------------------------------------------------
# Azure Media Services (env-driven; validated when a run starts)
# -----------------------------------------------------
AZURE_SUBSCRIPTION_ID = os.getenv("AZURE_SUBSCRIPTION_ID", "")
AZURE_RESOURCE_GROUP = os.getenv("AZURE_RESOURCE_GROUP", "")
AZURE_MEDIA_SERVICES_ACCOUNT_NAME = os.getenv("AZURE_MEDIA_SERVICES_ACCOUNT_NAME", "")
AZURE_INTERACTIVE_LOGIN = env_bool("AZURE_INTERACTIVE_LOGIN", False)

# -----------------------------------------------------
# Encoding workflow
# -----------------------------------------------------
_DOWNLOADS = Path.home() / "Downloads"

ENCODER_INPUT_FILE = Path(env("ENCODER_INPUT_FILE", str(_DOWNLOADS / "input.mp4"))).expanduser()
ENCODER_OUTPUT_DIR = Path(env("ENCODER_OUTPUT_DIR", str(_DOWNLOADS / "output"))).expanduser()
ENCODER_VIDEO_BITRATE = int(env("ENCODER_VIDEO_BITRATE", "1200000"))
ENCODER_SAS_EXPIRY_MINUTES = int(env("ENCODER_SAS_EXPIRY_MINUTES", "60"))
ENCODER_POLL_INTERVAL_SECONDS = float(env("ENCODER_POLL_INTERVAL_SECONDS", "1"))
ENCODER_POLL_MAX_SECONDS = env_int_or_none("ENCODER_POLL_MAX_SECONDS")      # None = unbounded
ENCODER_POLL_MAX_ATTEMPTS = env_int_or_none("ENCODER_POLL_MAX_ATTEMPTS")    # None = unbounded
ENCODER_EXPORT_MODE = env("ENCODER_EXPORT_MODE", "download")                # "download" | "publish"
ENCODER_PUBLISH_CONTAINER_URL = os.getenv("ENCODER_PUBLISH_CONTAINER_URL", "")
ENCODER_PUBLISH_PREFIX = env("ENCODER_PUBLISH_PREFIX", "published")
ENCODER_HTTP_TIMEOUT_SECONDS = int(env("ENCODER_HTTP_TIMEOUT_SECONDS", "60"))
