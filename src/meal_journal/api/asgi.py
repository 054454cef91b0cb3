"""ASGI entrypoint: ``uvicorn meal_journal.api.asgi:app``."""

from meal_journal.api.app import create_app
from meal_journal.containers import build_container

app = create_app(build_container())
