"""Main FastAPI application."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from planledger import __version__
from planledger.config import settings
from planledger.catalog import routes as catalog_routes
from planledger.entries import routes as entry_routes
from planledger.errors import PlanLedgerError
from planledger.nodes import routes as node_routes
from planledger.scenarios import routes as scenario_routes

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Error kind -> HTTP status
STATUS_BY_KIND = {
    "not_found": 404,
    "read_only_scenario": 409,
    "non_empty_node": 409,
    "conflict": 409,
    "invalid_hierarchy": 422,
    "invalid_service_binding": 422,
    "cross_scenario_parent": 422,
    "validation_error": 422,
    "storage_error": 503,
}

# Create FastAPI app
app = FastAPI(
    title="Plan Ledger API",
    description="Hierarchical P/L planning with versioned scenarios",
    version=__version__,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlanLedgerError)
async def plan_ledger_error_handler(request: Request, exc: PlanLedgerError):
    status_code = STATUS_BY_KIND.get(exc.kind, 400)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.kind, "detail": exc.message},
    )


# Include routers
app.include_router(scenario_routes.router, prefix=f"{settings.API_V1_PREFIX}/scenarios", tags=["Scenarios"])
app.include_router(node_routes.router, prefix=f"{settings.API_V1_PREFIX}/nodes", tags=["Plan Nodes"])
app.include_router(entry_routes.router, prefix=f"{settings.API_V1_PREFIX}/entries", tags=["Entries"])
app.include_router(catalog_routes.router, prefix=f"{settings.API_V1_PREFIX}/catalog", tags=["Catalog"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "planledger.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
