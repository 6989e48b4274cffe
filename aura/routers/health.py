from fastapi import APIRouter, Depends

from aura.repositories.base import ResourceStore
from aura.routers.deps import get_store

router = APIRouter(tags=["health"])


@router.get("/")
def health(store: ResourceStore = Depends(get_store)):
    return {
        "success": True,
        "status": "OK",
        "message": "AURA Coaching API is running",
        "backend": store.backend_name,
    }
