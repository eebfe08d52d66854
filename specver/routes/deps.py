# specver/routes/deps.py
from fastapi import Request

from specver.core.config import Settings
from specver.services.registry import RegistryService


def get_registry(request: Request) -> RegistryService:
    return request.app.state.registry


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
