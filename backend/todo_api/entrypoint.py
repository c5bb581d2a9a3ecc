import uvicorn

from todo_api.core.config import settings


def main() -> None:
    """Run the API under uvicorn.

    uvicorn handles SIGINT/SIGTERM and drives the app lifespan, so shutdown
    drains in-flight requests and then disposes the database engine.
    """
    uvicorn.run(
        "todo_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_timeout_seconds,
        reload=False,
    )


if __name__ == "__main__":
    main()
