"""FastAPI application factory."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from stravasource.api.routes import datasource as datasource_routes
from stravasource.config import get_settings
from stravasource.datasource import StravaDatasource
from stravasource.strava.client import StravaClient


def create_app(datasource: Optional[StravaDatasource] = None) -> FastAPI:
    """
    Build and return the FastAPI app.

    Args:
        datasource: Pre-built datasource (tests). When omitted, one is built
            from settings on startup and its Strava client closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if datasource is not None:
            app.state.datasource = datasource
            yield
            return

        settings = get_settings()
        client = StravaClient.from_settings(settings)
        app.state.datasource = StravaDatasource(settings, client)
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(
        title="Strava Datasource",
        description="Strava activities as time series, tables and map rows",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(datasource_routes.router, tags=["datasource"])

    return app


# Module-level app instance for uvicorn
app = create_app()
