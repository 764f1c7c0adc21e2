import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from filestore.core.config import Settings, get_settings
from filestore.core.errors import ApiError, handle_api_error, handle_request_validation_error
from filestore.models.database import Base, engine
from filestore.models import file, user  # noqa: F401  register tables on Base.metadata
from filestore.routers import auth, files, users

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create the FastAPI application with every router mounted under /api."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.info("creating db tables")
    Base.metadata.create_all(bind=engine)

    app = FastAPI(title="Filestore API", summary="Store user files", version="v1")
    app.state.settings = settings

    # include our routers
    app.include_router(auth.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(files.router, prefix="/api")

    app.add_exception_handler(ApiError, handle_api_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)

    @app.get("/api/health", tags=["health"])
    def health():
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
