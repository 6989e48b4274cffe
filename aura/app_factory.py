"""Entry point for uvicorn/gunicorn: ``uvicorn aura.app_factory:app``."""
from aura.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
