import logging

from reagent_inventory.domain import commands, model
from reagent_inventory.domain.exceptions import (
    DuplicateEntity,
    InUse,
    InvalidMovement,
    NotFound,
)
from reagent_inventory.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


def _clean(value):
    return value.strip() if value else value


def _get_or_raise(repo, entity_id, what: str):
    entity = repo.get(entity_id)
    if entity is None:
        raise NotFound(f"{what} {entity_id} not found")
    return entity


def _active_site(uow: AbstractUnitOfWork, site_id: int) -> model.Site:
    site = _get_or_raise(uow.sites, site_id, "Site")
    if not site.is_active:
        raise InvalidMovement(f"Site {site.name} is inactive")
    return site


def create_site(command: commands.CreateSite, uow: AbstractUnitOfWork) -> int:
    with uow:
        if uow.sites.find_by(name=_clean(command.name)):
            raise DuplicateEntity(f"Site {command.name} already exists")
        site = uow.sites.add(
            model.Site(name=command.name, location=command.location, is_active=command.is_active)
        )
        uow.commit()
        logger.info(f"Created site {site.id} ({site.name})")
        return site.id


def update_site(command: commands.UpdateSite, uow: AbstractUnitOfWork) -> int:
    with uow:
        site = _get_or_raise(uow.sites, command.site_id, "Site")
        other = uow.sites.find_by(name=_clean(command.name))
        if other is not None and other.id != site.id:
            raise DuplicateEntity(f"Site {command.name} already exists")
        site.update(command.name, command.location, command.is_active)
        uow.commit()
        logger.info(f"Updated site {command.site_id}")
        return command.site_id


def delete_site(command: commands.DeleteSite, uow: AbstractUnitOfWork) -> int:
    with uow:
        site = _get_or_raise(uow.sites, command.site_id, "Site")
        references = (
            uow.shipments.count_by(site_id=site.id)
            + uow.transfers.count_by(from_site_id=site.id)
            + uow.transfers.count_by(to_site_id=site.id)
            + uow.inventory_records.count_by(site_id=site.id)
        )
        if references:
            raise InUse(f"Site {site.name} is referenced by {references} records; deactivate it instead")
        uow.sites.delete(site)
        uow.commit()
        logger.info(f"Deleted site {command.site_id}")
        return command.site_id


def create_reagent(command: commands.CreateReagent, uow: AbstractUnitOfWork) -> int:
    with uow:
        if uow.reagents.find_by(name=_clean(command.name)):
            raise DuplicateEntity(f"Reagent {command.name} already exists")
        reagent = uow.reagents.add(model.Reagent(name=command.name, description=command.description))
        uow.commit()
        logger.info(f"Created reagent {reagent.id} ({reagent.name})")
        return reagent.id


def delete_reagent(command: commands.DeleteReagent, uow: AbstractUnitOfWork) -> int:
    with uow:
        reagent = _get_or_raise(uow.reagents, command.reagent_id, "Reagent")
        lot_count = uow.lots.count_by(reagent_id=reagent.id)
        if lot_count:
            raise InUse(f"Reagent {reagent.name} still has {lot_count} lots")
        uow.reagents.delete(reagent)
        uow.commit()
        logger.info(f"Deleted reagent {command.reagent_id}")
        return command.reagent_id


def create_lot(command: commands.CreateLot, uow: AbstractUnitOfWork) -> int:
    with uow:
        _get_or_raise(uow.reagents, command.reagent_id, "Reagent")
        lot_number = _clean(command.lot_number)
        if uow.lots.find_by(lot_number=lot_number):
            raise DuplicateEntity(f"Lot {command.lot_number} already exists")
        lot = uow.lots.add(
            model.Lot(
                lot_number=command.lot_number,
                reagent_id=command.reagent_id,
                expiration_date=command.expiration_date,
            )
        )
        uow.commit()
        logger.info(f"Created lot {lot.id} ({lot.lot_number})")
        return lot.id


def delete_lot(command: commands.DeleteLot, uow: AbstractUnitOfWork) -> int:
    with uow:
        lot = _get_or_raise(uow.lots, command.lot_id, "Lot")
        references = (
            uow.shipments.count_by(lot_id=lot.id)
            + uow.transfers.count_by(lot_id=lot.id)
            + uow.inventory_records.count_by(lot_id=lot.id)
        )
        if references:
            raise InUse(f"Lot {lot.lot_number} is referenced by {references} records")
        uow.lots.delete(lot)
        uow.commit()
        logger.info(f"Deleted lot {command.lot_id}")
        return command.lot_id


def record_shipment(command: commands.RecordShipment, uow: AbstractUnitOfWork) -> int:
    """
    Record a shipment of a lot to a site.

    A shipment entered with a received date is received right away and
    raises ShipmentReceived; otherwise it stays in transit until a
    ReceiveShipment command arrives.
    """
    logger.info(f"Recording shipment of lot {command.lot_id} to site {command.site_id}")

    with uow:
        _get_or_raise(uow.lots, command.lot_id, "Lot")
        _active_site(uow, command.site_id)

        shipment = model.Shipment(
            lot_id=command.lot_id,
            site_id=command.site_id,
            quantity=command.quantity,
            shipped_date=command.shipped_date,
        )
        if command.received_date is not None:
            shipment.receive(command.received_date)

        uow.shipments.add(shipment)
        uow.commit()
        logger.info(f"Committed shipment {shipment.id}")
        return shipment.id


def receive_shipment(command: commands.ReceiveShipment, uow: AbstractUnitOfWork) -> int:
    with uow:
        shipment = _get_or_raise(uow.shipments, command.shipment_id, "Shipment")
        shipment.receive(command.received_date)
        uow.commit()
        logger.info(f"Shipment {command.shipment_id} received on {command.received_date}")
        return command.shipment_id


def delete_shipment(command: commands.DeleteShipment, uow: AbstractUnitOfWork) -> int:
    with uow:
        shipment = _get_or_raise(uow.shipments, command.shipment_id, "Shipment")
        uow.shipments.delete(shipment)
        uow.commit()
        logger.info(f"Deleted shipment {command.shipment_id}")
        return command.shipment_id


def record_transfer(command: commands.RecordTransfer, uow: AbstractUnitOfWork) -> int:
    logger.info(
        f"Recording transfer of lot {command.lot_id} from site {command.from_site_id} "
        f"to site {command.to_site_id}"
    )

    with uow:
        _get_or_raise(uow.lots, command.lot_id, "Lot")
        _active_site(uow, command.from_site_id)
        _active_site(uow, command.to_site_id)

        transfer = model.Transfer(
            lot_id=command.lot_id,
            from_site_id=command.from_site_id,
            to_site_id=command.to_site_id,
            quantity=command.quantity,
            transfer_date=command.transfer_date,
        )
        transfer.record()

        uow.transfers.add(transfer)
        uow.commit()
        logger.info(f"Committed transfer {transfer.id}")
        return transfer.id


def delete_transfer(command: commands.DeleteTransfer, uow: AbstractUnitOfWork) -> int:
    with uow:
        transfer = _get_or_raise(uow.transfers, command.transfer_id, "Transfer")
        uow.transfers.delete(transfer)
        uow.commit()
        logger.info(f"Deleted transfer {command.transfer_id}")
        return command.transfer_id


def record_inventory(command: commands.RecordInventory, uow: AbstractUnitOfWork) -> int:
    logger.info(f"Recording inventory count for lot {command.lot_id} at site {command.site_id}")

    with uow:
        _get_or_raise(uow.lots, command.lot_id, "Lot")
        _active_site(uow, command.site_id)

        record = model.InventoryRecord(
            lot_id=command.lot_id,
            site_id=command.site_id,
            quantity_on_hand=command.quantity_on_hand,
            recorded_date=command.recorded_date,
            recorded_by=command.recorded_by,
        )
        record.record()

        uow.inventory_records.add(record)
        uow.commit()
        logger.info(f"Committed inventory record {record.id}")
        return record.id


def publish_movement_event(event, uow: AbstractUnitOfWork):
    """
    Publish a stock-movement event to Redis.

    Report consumers subscribe to refresh their cumulative-flow views.
    External failures are logged and never break the command that raised
    the event.
    """
    logger.info(f"Publishing {type(event).__name__} for lot {event.lot_id}")
    try:
        # Import here to avoid connecting at import time of the handlers
        from reagent_inventory.adapters import redis_adapter

        redis_adapter.publish(redis_adapter.MOVEMENTS_CHANNEL, event)

    except Exception as e:
        logger.error(f"Failed to publish {type(event).__name__} for lot {event.lot_id}: {e}")
        # Don't re-raise - external failures shouldn't break the flow
