# pylint: disable=broad-except
"""Message bus for the inventory service."""

from __future__ import annotations
import logging
from typing import List, Dict, Callable, Type, Union, TYPE_CHECKING

from reagent_inventory.domain import commands, events
from reagent_inventory.domain.commands import Command
from reagent_inventory.domain.events import Event
from reagent_inventory.service_layer import handlers

if TYPE_CHECKING:
    from reagent_inventory.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)

Message = Union[Command, Event]


def handle(
    message: Message,
    uow: AbstractUnitOfWork,
):
    """Handle message (command or event) with the appropriate handler."""
    results = []
    queue = [message]

    while queue:
        message = queue.pop(0)

        if isinstance(message, Event):
            handle_event(message, queue, uow)
        elif isinstance(message, Command):
            cmd_result = handle_command(message, queue, uow)
            results.append(cmd_result)
        else:
            raise Exception(f"{message} was not an Event or Command")

    return results


def handle_event(
    event: Event,
    queue: List[Message],
    uow: AbstractUnitOfWork,
):
    """Handle event by calling all registered event handlers."""
    for handler in EVENT_HANDLERS[type(event)]:
        try:
            logger.debug(f"handling event {event} with handler {handler.__name__}")
            handler(event, uow=uow)
            queue.extend(uow.collect_new_events())
        except Exception:
            logger.exception("Exception handling event %s", event)
            continue


def handle_command(
    command: Command,
    queue: List[Message],
    uow: AbstractUnitOfWork,
):
    """Handle command by calling the registered command handler."""
    logger.debug(f"handling command {command}")
    try:
        handler = COMMAND_HANDLERS[type(command)]
        result = handler(command, uow=uow)
        queue.extend(uow.collect_new_events())
        return result
    except Exception:
        logger.exception("Exception handling command %s", command)
        raise


# Event handlers - multiple handlers can respond to same event
EVENT_HANDLERS = {
    events.ShipmentReceived: [handlers.publish_movement_event],
    events.TransferRecorded: [handlers.publish_movement_event],
    events.InventoryRecorded: [handlers.publish_movement_event],
}  # type: Dict[Type[Event], List[Callable]]

# Command handlers - single handler per command type
COMMAND_HANDLERS = {
    commands.CreateSite: handlers.create_site,
    commands.UpdateSite: handlers.update_site,
    commands.DeleteSite: handlers.delete_site,
    commands.CreateReagent: handlers.create_reagent,
    commands.DeleteReagent: handlers.delete_reagent,
    commands.CreateLot: handlers.create_lot,
    commands.DeleteLot: handlers.delete_lot,
    commands.RecordShipment: handlers.record_shipment,
    commands.ReceiveShipment: handlers.receive_shipment,
    commands.DeleteShipment: handlers.delete_shipment,
    commands.RecordTransfer: handlers.record_transfer,
    commands.DeleteTransfer: handlers.delete_transfer,
    commands.RecordInventory: handlers.record_inventory,
}  # type: Dict[Type[Command], Callable]
