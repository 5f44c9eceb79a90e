import uvicorn

from labinsight.api.app import create_app
from labinsight.config.settings import Settings
from labinsight.database.connection import close_pool, init_pool
from labinsight.database.migrations import apply_schema
from labinsight.jobs.controller import build_controller
from labinsight.logging.logger import Log


def main() -> None:
    """Entry point: settings -> pool -> controller -> HTTP server."""
    settings = Settings()
    Log.configure(settings.log_level)
    uses_postgres = settings.job_store.lower() == "postgres"
    if uses_postgres:
        init_pool(settings)
        apply_schema()

    controller = build_controller(settings)
    try:
        app = create_app(settings, controller=controller)
        uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)
    finally:
        controller.shutdown()
        if uses_postgres:
            close_pool()


if __name__ == "__main__":
    main()
