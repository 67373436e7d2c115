"""
Main entrypoint.

Usage:
    python -m stravasource          # serves the datasource API under uvicorn
    python -m stravasource check    # one-off connection test against Strava
"""
import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


async def _run_check() -> int:
    from stravasource.config import get_settings
    from stravasource.datasource import StravaDatasource
    from stravasource.strava.client import StravaClient

    settings = get_settings()
    if not settings.strava_access_token:
        logger.warning("STRAVA_ACCESS_TOKEN not set, requests will be unauthenticated.")

    client = StravaClient.from_settings(settings)
    try:
        result = await StravaDatasource(settings, client).test_datasource()
    finally:
        await client.aclose()

    print(f"{result.status}: {result.message}")
    return 0 if result.status == "success" else 1


def _run_server() -> None:
    import uvicorn

    from stravasource.config import get_settings

    settings = get_settings()
    logger.info("Serving on %s:%d", settings.api_host, settings.api_port)
    uvicorn.run(
        "stravasource.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
    )


if __name__ == "__main__":
    # Dispatch on first argument: `python -m stravasource check` or just `python -m stravasource`
    if len(sys.argv) > 1 and sys.argv[1] == "check":
        sys.exit(asyncio.run(_run_check()))
    else:
        _run_server()
