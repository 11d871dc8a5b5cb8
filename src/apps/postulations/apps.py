from django.apps import AppConfig


class PostulationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.postulations"
