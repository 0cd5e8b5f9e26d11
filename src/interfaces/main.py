import uvicorn

from ..infrastructure.app_factory import create_application
from ..infrastructure.config.settings import get_settings
from ..infrastructure.logging import get_logger
from ..interfaces.api import router as api_router

settings = get_settings()
logger = get_logger(__name__)

app = create_application(
    router=api_router,
    settings=settings,
    summary="REST API for student records and a small lending library",
    description="""
    # Campus Records API

    A practice API over two collections, students and books:

    * **Students**: create, list, filter, search, bulk update and delete
    * **Library**: catalogue books, borrow them for a number of days and return them
    * **System**: health check and collection statistics

    Bulk update and delete by condition accept a small JSON filter language
    (`eq`, `ne`, `gt`, `gte`, `lt`, `lte`, `in`, `nin`, `exists`, `contains`,
    combined with `and` / `or`).
    """,
)


def run() -> None:
    """Serve the application with uvicorn on the configured host and port."""
    logger.info("Starting server", extra={"host": settings.HOST, "port": settings.PORT})
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
