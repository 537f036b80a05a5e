#!/usr/bin/env python3

"""
Backend for the EV swap trip planner.

Run locally:
  uvicorn backend.main:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations
import os
import traceback
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.env_defaults import read_rate_env_defaults
from evswap.io_fleet import ColumnMap, load_fleet_snapshot, source_path
from evswap.plan.config import debug_api, fleet_source, load_planner_config, load_routes_config
from evswap.plan.router import create_router as create_plan_router
from evswap.plan.routes_client import RoutesClient
from evswap.runtime import configure_logging

logger = configure_logging("backend")


# --------------------------------------------------------------------------------------------------
# Global Constants & Environment
# --------------------------------------------------------------------------------------------------
CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "*")
ALLOW_ORIGINS = [o.strip() for o in CORS_ALLOW_ORIGINS.split(",") if o.strip()] or ["*"]


def get_fleet():
    return load_fleet_snapshot(fleet_source())


def get_routes_client() -> RoutesClient:
    return RoutesClient.from_config(load_routes_config())


# --------------------------------------------------------------------------------------------------
# Public Endpoints
# --------------------------------------------------------------------------------------------------
def register_routes(app: FastAPI):
    @app.get("/health")
    def health():
        source = fleet_source()
        cols = ColumnMap()
        files = {}
        if not source.startswith(("http://", "https://")):
            for name in (cols.branches_file, cols.vehicles_file, cols.trips_file):
                files[name] = Path(source_path(source, name)).exists()
        ready = all(files.values()) if files else True
        return {
            "status": "ok" if ready else "needs_data",
            "fleet_source": source,
            "files": files,
            "routes_api_configured": bool(load_routes_config().api_key),
        }

    @app.get("/config")
    def config():
        rates = read_rate_env_defaults()
        return {
            "planner": load_planner_config().to_dict(),
            "rates": {
                "emission_kg_per_km": rates.emission_kg_per_km,
                "cost_per_km": rates.cost_per_km,
                "currency": rates.currency,
            },
            "cors_allow_origins": ALLOW_ORIGINS,
            "fleet_source": fleet_source(),
        }

# --------------------------------------------------------------------------------------------------
# FastAPI App (with lifespan)
# --------------------------------------------------------------------------------------------------
def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = load_planner_config()
        logger.info(
            "Startup: fleet source=%s lateral=%.0fm range>%.0fkm tz=%s",
            fleet_source(), cfg.lateral_threshold_m, cfg.range_threshold_km, cfg.tz_name,
        )
        if not load_routes_config().api_key:
            logger.warning("GOOGLE_MAPS_API_KEY not set; /plan/trip and /plan/transit will fail")
        yield

    app = FastAPI(title="EV Swap Trip Planner", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        logger.exception("Unhandled error on %s", request.url.path)
        payload = {"error": str(exc)}
        if debug_api():
            payload["traceback"] = traceback.format_exc()
        return JSONResponse(status_code=500, content=payload)

    app.include_router(
        create_plan_router(
            get_fleet,
            load_planner_config,
            get_routes_client,
            read_rate_env_defaults,
        )
    )

    register_routes(app)
    return app

app = create_app()


# --------------------------------------------------------------------------------------------------
# Entrypoint
# --------------------------------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("backend.main:app", host="0.0.0.0", port=port, reload=False)
