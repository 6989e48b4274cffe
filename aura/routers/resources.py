"""CRUD routers for the four collections, generated from one template."""
from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from aura.repositories.base import ResourceStore
from aura.routers.deps import get_store


def build_resource_router(
    collection: str,
    singular: str,
    *,
    allow_update: bool = True,
    allow_mark_read: bool = False,
) -> APIRouter:
    router = APIRouter(prefix=f"/api/{collection}", tags=[collection])

    @router.get("")
    def list_records(store: ResourceStore = Depends(get_store)):
        return {"success": True, collection: store.list(collection)}

    @router.post("")
    def create_record(payload: Any = Body(default=None), store: ResourceStore = Depends(get_store)):
        return {"success": True, singular: store.create(collection, payload)}

    @router.get("/{record_id}")
    def get_record(record_id: str, store: ResourceStore = Depends(get_store)):
        return {"success": True, singular: store.get(collection, record_id)}

    if allow_update:

        @router.put("/{record_id}")
        def update_record(
            record_id: str,
            payload: Any = Body(default=None),
            store: ResourceStore = Depends(get_store),
        ):
            return {"success": True, singular: store.update(collection, record_id, payload)}

    if allow_mark_read:

        @router.put("/{record_id}/mark-read")
        def mark_read(record_id: str, store: ResourceStore = Depends(get_store)):
            return {"success": True, singular: store.mark_read(record_id, collection=collection)}

    @router.delete("/{record_id}")
    def delete_record(record_id: str, store: ResourceStore = Depends(get_store)):
        store.delete(collection, record_id)
        return {"success": True}

    return router


# Applications only change through mark-read; lessons have no update at all.
applications = build_resource_router("applications", "application", allow_update=False, allow_mark_read=True)
students = build_resource_router("students", "student")
coaches = build_resource_router("coaches", "coach")
lessons = build_resource_router("lessons", "lesson", allow_update=False)

routers = [applications, students, coaches, lessons]
