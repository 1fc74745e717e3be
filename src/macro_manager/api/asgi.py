"""ASGI entrypoint for the macro manager API."""

from macro_manager.api.app import create_app
from macro_manager.containers import build_container

app = create_app(build_container())
