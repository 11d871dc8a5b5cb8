"""
CI / test settings: imports all production config but disables the HTTPS
redirect so Django's test client (which speaks plain HTTP) can reach views.
Use via: DJANGO_SETTINGS_MODULE=config.settings.ci
"""
import dj_database_url

from .production import *  # noqa: F403

# Django's test client sends plain-HTTP requests; the SecurityMiddleware would
# permanently redirect every request to HTTPS before any view runs.
SECURE_SSL_REDIRECT = False

# Postgres when the pipeline links one, otherwise SQLite (in-memory under pytest).
DATABASES = {  # noqa: F405
    "default": dj_database_url.parse(
        get_env("DATABASE_URL", f"sqlite:///{BASE_DIR / 'ci.sqlite3'}"),  # noqa: F405
    )
}

# CompressedManifestStaticFilesStorage requires collectstatic to have been run
# (it reads staticfiles.json). Use the plain storage backend in tests instead.
STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

# Tests hammer the mutating endpoints.
REFDESK_SUBMIT_RATE = "1000/m"
