"""API routes for maintenance tasks."""

from fastapi import APIRouter, Depends, Request

from hydroponics.database import Database, get_db
from hydroponics.schemas.configuration import PruneResponse

router = APIRouter(prefix="/mantenimiento", tags=["Maintenance"])


@router.post("/limpieza", response_model=PruneResponse, summary="Prune history now")
async def trigger_prune(request: Request, db: Database = Depends(get_db)):
    """Run retention immediately, waiting for a scheduled run in flight to finish."""
    results = await request.app.state.pruner.run(db)
    return PruneResponse(deleted=results, total_deleted=sum(results.values()))
