"""Request dependencies."""

from fastapi import Request

from .config import Settings
from .store import ProductStore


def get_store(request: Request) -> ProductStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
