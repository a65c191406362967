"""FastAPI application."""

from fastapi import FastAPI

from tripcore.api.errors import register_exception_handlers
from tripcore.api.routes.directions import router as directions_router
from tripcore.api.routes.health import router as health_router
from tripcore.api.routes.metrics import router as metrics_router
from tripcore.api.routes.optimize import router as optimize_router
from tripcore.api.routes.trips import router as trips_router

app = FastAPI(title="Trip Planner Core API", version="0.1.0")

register_exception_handlers(app)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(trips_router)
app.include_router(directions_router)
app.include_router(optimize_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Trip Planner Core API", "version": "0.1.0"}
