import os
from pathlib import Path

from django.core.asgi import get_asgi_application
from dotenv import load_dotenv

root = Path(__file__).resolve().parents[2]
load_dotenv(root / ".env")
load_dotenv(root / ".env.local", override=True)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

application = get_asgi_application()
