"""Shared FastAPI dependencies."""

from fastapi import Request

from adjutant.services.settings_store import SettingsStore


def get_settings_store(request: Request) -> SettingsStore:
    """The app's ``SettingsStore`` (created in ``create_app``)."""
    return request.app.state.settings_store
