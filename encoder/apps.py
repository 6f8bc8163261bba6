from django.apps import AppConfig


class EncoderConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "encoder"
