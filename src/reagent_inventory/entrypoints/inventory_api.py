"""
Inventory API Entrypoint - Thin API with Command Dispatch
Writes go through the message bus, reads through views.
"""
from datetime import date, datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel
import logging

from reagent_inventory import views
from reagent_inventory.adapters import orm
from reagent_inventory.domain import commands
from reagent_inventory.domain.exceptions import (
    DuplicateEntity,
    InUse,
    InvalidEntity,
    InvalidMovement,
    NotFound,
)
from reagent_inventory.service_layer import messagebus
from reagent_inventory.service_layer.unit_of_work import DEFAULT_ENGINE, SqlAlchemyUnitOfWork

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

orm.start_mappers()

app = FastAPI(
    title="Reagent Inventory API",
    description="Sites, reagents, lots, stock movements and dashboard alerts",
    version="1.0.0"
)


@app.on_event("startup")
async def startup_event():
    orm.metadata.create_all(DEFAULT_ENGINE)
    logger.info("Inventory tables initialized")


def get_uow():
    return SqlAlchemyUnitOfWork()


# ---------- Request models ----------

class SiteRequest(BaseModel):
    name: str
    location: Optional[str] = None
    is_active: bool = True


class ReagentRequest(BaseModel):
    name: str
    description: Optional[str] = None


class LotRequest(BaseModel):
    lot_number: str
    reagent_id: int
    expiration_date: date


class ShipmentRequest(BaseModel):
    lot_id: int
    site_id: int
    quantity: int
    shipped_date: date
    received_date: Optional[date] = None


class ReceiveRequest(BaseModel):
    received_date: date


class TransferRequest(BaseModel):
    lot_id: int
    from_site_id: int
    to_site_id: int
    quantity: int
    transfer_date: date


class InventoryRequest(BaseModel):
    lot_id: int
    site_id: int
    quantity_on_hand: int
    recorded_date: date
    recorded_by: str

    model_config = {
        "json_schema_extra": {
            "example": {
                "lot_id": 1,
                "site_id": 1,
                "quantity_on_hand": 42,
                "recorded_date": "2024-10-24",
                "recorded_by": "Alice",
            }
        }
    }


def dispatch(cmd: commands.Command, uow) -> int:
    """Handle a command and map domain errors onto HTTP status codes."""
    try:
        return messagebus.handle(cmd, uow)[0]
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (DuplicateEntity, InUse) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (InvalidEntity, InvalidMovement) as e:
        raise HTTPException(status_code=400, detail=str(e))


# ---------- Endpoints ----------

@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "reagent-inventory-api",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@app.get("/api/v1/sites")
def get_sites(active_only: bool = False, uow=Depends(get_uow)):
    return views.list_sites(uow, active_only=active_only)


@app.post("/api/v1/sites", status_code=201)
def create_site(request: SiteRequest, uow=Depends(get_uow)):
    site_id = dispatch(commands.CreateSite(**request.model_dump()), uow)
    return {"id": site_id}


@app.put("/api/v1/sites/{site_id}")
def update_site(site_id: int, request: SiteRequest, uow=Depends(get_uow)):
    dispatch(commands.UpdateSite(site_id=site_id, **request.model_dump()), uow)
    return {"id": site_id}


@app.delete("/api/v1/sites/{site_id}")
def delete_site(site_id: int, uow=Depends(get_uow)):
    dispatch(commands.DeleteSite(site_id=site_id), uow)
    return {"id": site_id, "deleted": True}


@app.get("/api/v1/reagents")
def get_reagents(uow=Depends(get_uow)):
    return views.list_reagents(uow)


@app.post("/api/v1/reagents", status_code=201)
def create_reagent(request: ReagentRequest, uow=Depends(get_uow)):
    reagent_id = dispatch(commands.CreateReagent(**request.model_dump()), uow)
    return {"id": reagent_id}


@app.delete("/api/v1/reagents/{reagent_id}")
def delete_reagent(reagent_id: int, uow=Depends(get_uow)):
    dispatch(commands.DeleteReagent(reagent_id=reagent_id), uow)
    return {"id": reagent_id, "deleted": True}


@app.get("/api/v1/lots")
def get_lots(uow=Depends(get_uow)):
    return views.list_lots(uow)


@app.post("/api/v1/lots", status_code=201)
def create_lot(request: LotRequest, uow=Depends(get_uow)):
    lot_id = dispatch(commands.CreateLot(**request.model_dump()), uow)
    return {"id": lot_id}


@app.delete("/api/v1/lots/{lot_id}")
def delete_lot(lot_id: int, uow=Depends(get_uow)):
    dispatch(commands.DeleteLot(lot_id=lot_id), uow)
    return {"id": lot_id, "deleted": True}


@app.get("/api/v1/shipments")
def get_shipments(uow=Depends(get_uow)):
    return views.list_shipments(uow)


@app.post("/api/v1/shipments", status_code=201)
def record_shipment(request: ShipmentRequest, uow=Depends(get_uow)):
    """
    Record a shipment. Leave received_date empty while it is in transit and
    mark it received later via /receive.
    """
    shipment_id = dispatch(commands.RecordShipment(**request.model_dump()), uow)
    return {"id": shipment_id}


@app.post("/api/v1/shipments/{shipment_id}/receive")
def receive_shipment(shipment_id: int, request: ReceiveRequest, uow=Depends(get_uow)):
    dispatch(
        commands.ReceiveShipment(shipment_id=shipment_id, received_date=request.received_date),
        uow,
    )
    return {"id": shipment_id, "received_date": request.received_date.isoformat()}


@app.delete("/api/v1/shipments/{shipment_id}")
def delete_shipment(shipment_id: int, uow=Depends(get_uow)):
    dispatch(commands.DeleteShipment(shipment_id=shipment_id), uow)
    return {"id": shipment_id, "deleted": True}


@app.get("/api/v1/transfers")
def get_transfers(uow=Depends(get_uow)):
    return views.list_transfers(uow)


@app.post("/api/v1/transfers", status_code=201)
def record_transfer(request: TransferRequest, uow=Depends(get_uow)):
    transfer_id = dispatch(commands.RecordTransfer(**request.model_dump()), uow)
    return {"id": transfer_id}


@app.delete("/api/v1/transfers/{transfer_id}")
def delete_transfer(transfer_id: int, uow=Depends(get_uow)):
    dispatch(commands.DeleteTransfer(transfer_id=transfer_id), uow)
    return {"id": transfer_id, "deleted": True}


@app.get("/api/v1/inventory-records")
def get_inventory_records(uow=Depends(get_uow)):
    return views.list_inventory_records(uow)


@app.post("/api/v1/inventory-records", status_code=201)
def record_inventory(request: InventoryRequest, uow=Depends(get_uow)):
    record_id = dispatch(commands.RecordInventory(**request.model_dump()), uow)
    return {"id": record_id}


@app.get("/api/v1/dashboard/stats")
def get_dashboard_stats(today: Optional[date] = None, uow=Depends(get_uow)):
    """Headline counts; today defaults to the current date."""
    return views.get_dashboard_stats(today or date.today(), uow)


@app.get("/api/v1/dashboard/alerts")
def get_risk_alerts(today: Optional[date] = None, uow=Depends(get_uow)):
    """Risk alerts sorted by severity, then site name."""
    alerts = views.get_risk_alerts(today or date.today(), uow)
    return {"count": len(alerts), "alerts": alerts}
