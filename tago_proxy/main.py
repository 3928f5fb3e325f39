"""FastAPI application proxying TAGO bus locations to the browser."""
from fastapi import FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
from typing import List, Optional

import httpx

from . import __version__
from .config import get_settings
from .errors import TagoProxyError
from .models import City, ErrorResponse, HealthResponse, LocationQuery, LocationRecord
from .tago_service import TagoService

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Global services
http_client: Optional[httpx.AsyncClient] = None
tago_service: Optional[TagoService] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global http_client, tago_service

    # Startup
    logger.info("Starting bus location proxy...")

    http_client = httpx.AsyncClient(timeout=settings.request_timeout_seconds)
    tago_service = TagoService(settings, http_client)

    if not settings.credential_configured:
        logger.warning("TAGO_SERVICE_KEY is not set; API requests will fail with 500")
    logger.info(f"Using TAGO at: {settings.tago_base_url} (format={settings.response_format})")

    yield

    # Shutdown
    logger.info("Shutting down bus location proxy...")
    await http_client.aclose()


# Create FastAPI app
app = FastAPI(
    title="TAGO Bus Location Proxy",
    description="Real-time bus positions from the TAGO public transit API",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(TagoProxyError)
async def tago_proxy_error_handler(request: Request, exc: TagoProxyError):
    """Render proxy errors as JSON bodies with an error message."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get(
    "/api/bus-locations",
    response_model=List[LocationRecord],
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_bus_locations(
    response: Response,
    cityCode: Optional[str] = Query(None, description="TAGO city code"),
    routeId: Optional[str] = Query(None, description="TAGO route id"),
):
    """
    Current positions of the buses running on a route.

    Returns an empty list when no bus is running.
    """
    query = LocationQuery.from_params(cityCode, routeId)

    try:
        locations = await tago_service.fetch_locations(query)
    except TagoProxyError:
        raise
    except Exception as e:
        logger.exception(f"Error in bus-locations endpoint: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    response.headers["Cache-Control"] = "no-store"
    return locations


@app.get(
    "/api/cities",
    response_model=List[City],
    responses={500: {"model": ErrorResponse}},
)
async def get_cities():
    """City codes supported by TAGO."""
    try:
        return await tago_service.fetch_cities()
    except TagoProxyError:
        raise
    except Exception as e:
        logger.exception(f"Error in cities endpoint: {e}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        upstream_format=settings.response_format,
        credential_configured=settings.credential_configured
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "TAGO Bus Location Proxy",
        "version": __version__,
        "status": "running",
        "endpoints": {
            "health": "/health",
            "bus_locations": "/api/bus-locations?cityCode=&routeId=",
            "cities": "/api/cities",
            "docs": "/docs"
        }
    }


def run():
    """Run the proxy with uvicorn."""
    import uvicorn

    uvicorn.run(
        "tago_proxy.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run()
