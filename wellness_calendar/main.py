"""Main FastAPI application for the wellness calendar."""
import logging
import os

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from wellness_calendar.db.init import init_db
from wellness_calendar.events.dispatcher import activity_events
from wellness_calendar.events.publisher import EVENT_PUBLISHING_ENABLED, DaprEventPublisher
from wellness_calendar.middleware.cors import add_cors_middleware
from wellness_calendar.routers import activities, presets, recurrence
from wellness_calendar.services.errors import MaterializationError, TemplateNotFoundError
from wellness_calendar.utils.metrics import metrics_collector

logger = logging.getLogger("wellness_calendar")

VERSION = "1.0.0"


def create_app(initialize_database: bool = True) -> FastAPI:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    app = FastAPI(
        title="Wellness Calendar API",
        description="Activity calendar with recurrence groups and presets",
        version=VERSION,
    )

    add_cors_middleware(app)

    app.include_router(recurrence.router, prefix="/api")
    app.include_router(presets.router, prefix="/api")
    app.include_router(activities.router, prefix="/api")

    @app.on_event("startup")
    async def startup_event():
        """Initialize database and event publishing on startup."""
        if initialize_database:
            init_db()
        if EVENT_PUBLISHING_ENABLED:
            publisher = DaprEventPublisher()
            app.state.unsubscribe_publisher = activity_events.subscribe(publisher)
            logger.info("Activity events forwarded to Dapr pub/sub")
        logger.info("Application startup complete.")

    @app.on_event("shutdown")
    async def shutdown_event():
        unsubscribe = getattr(app.state, "unsubscribe_publisher", None)
        if unsubscribe:
            unsubscribe()

    @app.exception_handler(MaterializationError)
    async def materialization_error_handler(request: Request, exc: MaterializationError):
        logger.error("Materialization failed: %s", exc.message)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": exc.message, "created": exc.created, "total": exc.total, "partial": exc.partial},
        )

    @app.exception_handler(TemplateNotFoundError)
    async def template_not_found_handler(request: Request, exc: TemplateNotFoundError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": str(exc), "template_id": exc.template_id},
        )

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": VERSION}

    @app.get("/")
    async def root():
        """Root endpoint - API welcome message."""
        return {
            "message": "Welcome to the Wellness Calendar API",
            "version": VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    @app.get("/metrics")
    async def metrics():
        return metrics_collector.get_metrics()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "wellness_calendar.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("ENVIRONMENT", "development") == "development",
    )
