"""
Reports API - Read endpoints for cumulative-flow reports.
Thin API layer delegates to views.
"""

from datetime import date, datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query
import logging

from flow_reports import views
from reagent_inventory.adapters import orm
from reagent_inventory.domain.exceptions import NotFound
from reagent_inventory.service_layer.unit_of_work import DEFAULT_ENGINE, SqlAlchemyUnitOfWork

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

orm.start_mappers()

app = FastAPI(
    title="Reagent Flow Reports API",
    description="Cumulative-flow reports and usage statistics per lot",
    version="1.0.0"
)


@app.on_event("startup")
async def startup_event():
    orm.metadata.create_all(DEFAULT_ENGINE)
    logger.info("Inventory tables initialized")


def get_uow():
    return SqlAlchemyUnitOfWork()


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "flow-reports-api",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.get("/api/v1/reports/cumulative-flow")
def get_cumulative_flow(
    lot_id: int,
    site_id: Optional[int] = None,
    as_of: Optional[date] = Query(None, description="View data as of this date"),
    uow=Depends(get_uow),
):
    """
    Cumulative received, used and on-hand series for a lot.

    Args:
        lot_id: Lot to report on (required)
        site_id: Narrow to one site; omit for all sites summed per date
        as_of: Ignore events after this date (default: today)

    Returns:
        data_points, stats (null without data), scope, as_of, description

    Raises:
        404 when the lot or the given site does not exist
    """
    try:
        return views.get_cumulative_flow(lot_id, site_id, as_of, uow)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/api/v1/reports/options")
def get_report_options(uow=Depends(get_uow)):
    """Active sites and lots to populate the report filters."""
    return views.get_report_options(uow)
