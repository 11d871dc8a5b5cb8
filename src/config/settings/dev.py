"""
Local development settings. Falls back to a SQLite file next to manage.py
when no DATABASE_URL is provided.
"""
import dj_database_url

from .base import *  # noqa: F403

DEBUG = True

DATABASES = {  # noqa: F405
    "default": dj_database_url.parse(
        get_env("DATABASE_URL", f"sqlite:///{BASE_DIR / 'refdesk.sqlite3'}"),  # noqa: F405
    )
}
