"""API route modules."""

from thingslog.api.settings import router as settings_router
from thingslog.api.sync import router as sync_router

__all__ = ["settings_router", "sync_router"]
