"""Service Entry Point.

FastAPI application that opens an ingestion session for every WebSocket
subscriber and serves the stored snapshot and plate proximity analysis
over REST. Run with ``uvicorn quakewatch.main:app`` or ``quakewatch serve``.
"""

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Sequence

from fastapi import FastAPI, HTTPException, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from quakewatch.analysis import analyze_events
from quakewatch.core.config import Config, validate_config
from quakewatch.core.earthquake import filter_by_magnitude
from quakewatch.core.geo import BoundarySegment
from quakewatch.core.record import build_feature_collection, event_to_payload
from quakewatch.scheduler import FeedFetcher, IngestionScheduler
from quakewatch.shell.boundary_loader import load_boundaries
from quakewatch.shell.broadcast import WebSocketChannel
from quakewatch.shell.config_loader import DEFAULT_CONFIG_PATH, load_config, load_config_from_env
from quakewatch.shell.event_store import EventStore, InMemoryEventStore
from quakewatch.shell.firestore_client import FirestoreConfig, FirestoreEventStore
from quakewatch.shell.usgs_client import USGSClient


# Configure logging
log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Comma-separated list of browser origins allowed to call the REST API
CORS_ORIGINS = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]


# ===== Response Models =====

class HealthResponse(BaseModel):
    status: str
    sessions: int
    boundaries: int


class NearEarthquake(BaseModel):
    id: str | None
    place: str | None
    magnitude: float | None
    distance_km: float
    coordinates: list[float]


class PlateAnalysisResponse(BaseModel):
    threshold_km: float
    near_count: int
    far_count: int
    near: list[NearEarthquake]


def _get_config() -> Config:
    """Load configuration from file or environment."""
    config_path = os.environ.get("CONFIG_PATH")

    if config_path:
        return load_config(config_path)
    elif os.path.exists(DEFAULT_CONFIG_PATH):
        return load_config()
    else:
        return load_config_from_env()


def build_store(config: Config) -> EventStore:
    """Create the event store selected by the configuration."""
    if config.store_backend == "firestore":
        return FirestoreEventStore(
            FirestoreConfig(
                database=config.firestore_database,
                collection=config.firestore_collection,
            )
        )
    return InMemoryEventStore()


def build_fetcher(config: Config) -> USGSClient:
    """Create the USGS feed client from the configuration."""
    return USGSClient(
        timeout=config.fetch_timeout_seconds,
        retry=config.retry,
        min_magnitude=config.min_fetch_magnitude,
        bounds=config.bounds,
    )


def _load_configured_boundaries(config: Config) -> list[BoundarySegment]:
    """Load the plate boundary dataset, or nothing if it is unavailable."""
    if not config.boundaries_path:
        return []

    try:
        return load_boundaries(config.boundaries_path)
    except (OSError, ValueError) as e:
        logger.error("Failed to load plate boundaries: %s", e)
        return []


def create_app(
    config: Config | None = None,
    store: EventStore | None = None,
    fetcher: FeedFetcher | None = None,
    boundaries: Sequence[BoundarySegment] | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Collaborators that are not provided are created from the configuration
    when the application starts.

    Args:
        config: Application configuration (loaded at startup if omitted)
        store: Event store
        fetcher: Feed fetcher
        boundaries: Parsed plate boundaries

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = config if config is not None else _get_config()

        validation = validate_config(cfg)
        for warning in validation.warnings:
            logger.warning("Config %s: %s", warning.field, warning.message)
        if not validation.valid:
            details = "; ".join(f"{e.field}: {e.message}" for e in validation.critical_errors)
            raise ValueError(f"Invalid configuration: {details}")

        app.state.config = cfg
        app.state.store = store if store is not None else build_store(cfg)
        app.state.scheduler = IngestionScheduler(
            cfg,
            fetcher if fetcher is not None else build_fetcher(cfg),
            app.state.store,
        )
        app.state.boundaries = (
            list(boundaries) if boundaries is not None else _load_configured_boundaries(cfg)
        )

        logger.info("Earthquake service started")
        yield

        await app.state.scheduler.shutdown()
        logger.info("Earthquake service stopped")

    app = FastAPI(
        title="Earthquake Feed API",
        description="Streams deduplicated USGS earthquake events and plate proximity analysis",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    async def _snapshot(request: Request, limit: int | None = None) -> list:
        """Query the latest snapshot or raise 503."""
        cfg: Config = request.app.state.config
        try:
            return await asyncio.to_thread(
                request.app.state.store.list_recent,
                limit or cfg.snapshot_limit,
            )
        except Exception:
            logger.exception("Failed to query event store")
            raise HTTPException(status_code=503, detail="Event store unavailable")

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request):
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            sessions=len(request.app.state.scheduler.sessions),
            boundaries=len(request.app.state.boundaries),
        )

    @app.get("/earthquakes")
    async def get_earthquakes(
        request: Request,
        limit: int | None = Query(default=None, ge=1, le=5000),
        min_magnitude: float | None = Query(default=None),
    ):
        """Get the most recent stored earthquakes, newest first."""
        events = filter_by_magnitude(await _snapshot(request, limit), min_magnitude)

        return {
            "allEarthquakes": [event_to_payload(e) for e in events],
            "count": len(events),
            "fetched_at": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/earthquakes/geojson")
    async def get_earthquakes_geojson(
        request: Request,
        limit: int | None = Query(default=None, ge=1, le=5000),
    ) -> dict[str, Any]:
        """Get the snapshot as a GeoJSON FeatureCollection."""
        events = await _snapshot(request, limit)
        collection, excluded = build_feature_collection([event_to_payload(e) for e in events])

        if excluded:
            logger.warning("Excluded %d event(s) with invalid coordinates", len(excluded))

        return collection

    @app.get("/analysis/plates", response_model=PlateAnalysisResponse)
    async def get_plate_analysis(
        request: Request,
        threshold_km: float | None = Query(default=None, gt=0),
    ):
        """Classify the snapshot by distance to the nearest plate boundary."""
        boundaries = request.app.state.boundaries
        if not boundaries:
            raise HTTPException(status_code=503, detail="Plate boundary dataset not loaded")

        threshold = threshold_km or request.app.state.config.proximity_threshold_km
        events = await _snapshot(request)
        summary = analyze_events(events, boundaries, threshold)

        return {
            "threshold_km": threshold,
            "near_count": summary.near_count,
            "far_count": summary.far_count,
            "near": [
                {
                    "id": r.event.get("id"),
                    "place": r.event["properties"].get("place"),
                    "magnitude": r.event["properties"].get("mag"),
                    "distance_km": round(r.nearest_distance_km, 1),
                    "coordinates": r.event["geometry"]["coordinates"],
                }
                for r in summary.near
            ],
        }

    @app.websocket("/ws")
    async def earthquake_stream(websocket: WebSocket):
        """WebSocket endpoint streaming ``data-update`` snapshots.

        The server pushes ``{"event": "data-update", "data": {...}}`` once on
        connect and then every poll interval. Sending ``"ping"`` returns
        ``{"event": "pong"}``; binary frames are ignored.
        """
        await websocket.accept()
        logger.info("Client connected")

        scheduler: IngestionScheduler = websocket.app.state.scheduler
        channel = WebSocketChannel(websocket)
        session = scheduler.start_session(channel)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.info("Client disconnected")
                    break
                # Binary frames carry no commands
                if message.get("text") == "ping":
                    await websocket.send_json({"event": "pong"})
        except WebSocketDisconnect:
            logger.info("Client disconnected")
        finally:
            channel.close()
            scheduler.stop_session(session.session_id)

    return app


app = create_app()
