"""FastAPI application with lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from labinsight.api.errors import register_error_handlers
from labinsight.api.routes import documents, health, jobs, subjects
from labinsight.config.settings import Settings
from labinsight.documents.file_store import FileStore
from labinsight.documents.validation import UploadValidator
from labinsight.jobs.controller import AnalysisJobController, build_controller
from labinsight.logging.logger import Log


def create_app(
    settings: Settings,
    controller: AnalysisJobController | None = None,
) -> FastAPI:
    """Build the HTTP app. A controller passed in stays owned by the caller."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        owned = controller is None
        app.state.settings = settings
        app.state.controller = build_controller(settings) if owned else controller
        app.state.file_store = FileStore(settings.files_root)
        app.state.upload_validator = UploadValidator(
            settings.allowed_mime_types, settings.max_upload_bytes
        )
        Log.info("API started", env=settings.app_env, job_store=settings.job_store)
        try:
            yield
        finally:
            if owned:
                app.state.controller.shutdown()
            Log.info("API stopped")

    app = FastAPI(title="labinsight", lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health.router)
    app.include_router(documents.router)
    app.include_router(jobs.router)
    app.include_router(subjects.router)
    return app
