"""
REST API main application.
Entry point for the FastAPI REST server.
"""

from fastapi import FastAPI

from shared.config.settings import settings
from rest_api.core.cors import configure_cors
from rest_api.core.exception_handlers import register_exception_handlers
from rest_api.core.lifespan import lifespan
from rest_api.core.middlewares import register_middlewares
from rest_api.routers.areas import router as areas_router
from rest_api.routers.complaints import router as complaints_router
from rest_api.routers.identity import router as identity_router
from rest_api.routers.profiles import router as profiles_router
from rest_api.routers.public import health_router
from rest_api.routers.ratings import router as ratings_router
from rest_api.routers.stats import router as stats_router
from rest_api.routers.vendors import router as vendors_router


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(
        title="Street Food Portal API",
        version="1.0.0",
        description="Complaints, vendor ratings and profiles for the street-food civic feedback portal.",
        lifespan=lifespan,
        debug=settings.debug,
    )

    register_exception_handlers(app)
    register_middlewares(app)
    configure_cors(app)

    app.include_router(health_router)
    app.include_router(identity_router)
    app.include_router(areas_router)
    app.include_router(profiles_router)
    app.include_router(vendors_router)
    app.include_router(complaints_router)
    app.include_router(ratings_router)
    app.include_router(stats_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("rest_api.main:app", host="0.0.0.0", port=settings.rest_api_port, reload=settings.debug)
