from __future__ import annotations

from fastapi import Request

from aura.repositories.base import ResourceStore


def get_store(request: Request) -> ResourceStore:
    store = getattr(getattr(request.app, "state", None), "store", None)
    if store is None:
        raise RuntimeError("Resource store not configured")
    return store
