"""Run the API with uvicorn on the configured PORT: ``python -m aura``."""
import uvicorn

from aura.core.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "aura.app_factory:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.app_env == "dev",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
