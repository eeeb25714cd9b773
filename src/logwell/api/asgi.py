"""ASGI entrypoint for the LogWell API."""

from logwell.api.app import create_app
from logwell.containers import build_container

app = create_app(build_container())
