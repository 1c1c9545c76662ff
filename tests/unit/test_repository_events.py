"""
Unit tests for repository tracking and event collection.
Uses in-memory fakes so no database is involved.
"""
from datetime import date
from unittest.mock import Mock

import pytest

from reagent_inventory.adapters.repository import AbstractRepository, SqlAlchemyRepository
from reagent_inventory.domain import commands, model
from reagent_inventory.domain.events import InventoryRecorded
from reagent_inventory.domain.exceptions import NotFound
from reagent_inventory.service_layer import messagebus
from reagent_inventory.service_layer.unit_of_work import AbstractUnitOfWork


class FakeRepository(AbstractRepository):
    def __init__(self, entities=()):
        super().__init__()
        self._entities = list(entities)

    def _add(self, entity):
        entity.id = entity.id or len(self._entities) + 1
        self._entities.append(entity)

    def _get(self, entity_id):
        return next((e for e in self._entities if e.id == entity_id), None)

    def _find_by(self, **filters):
        return next(
            (e for e in self._entities if all(getattr(e, k) == v for k, v in filters.items())), None
        )

    def _list(self):
        return list(self._entities)

    def _count_by(self, **filters):
        return sum(all(getattr(e, k) == v for k, v in filters.items()) for e in self._entities)

    def _delete(self, entity):
        self._entities.remove(entity)


class FakeUnitOfWork(AbstractUnitOfWork):
    def __init__(self):
        self.sites = FakeRepository([model.Site(name="Lab A", id=1)])
        self.reagents = FakeRepository([model.Reagent(name="Ethanol", id=1)])
        self.lots = FakeRepository(
            [model.Lot(lot_number="LOT101", reagent_id=1, expiration_date=date(2025, 1, 1), id=1)]
        )
        self.shipments = FakeRepository()
        self.transfers = FakeRepository()
        self.inventory_records = FakeRepository()
        self.committed = False

    def _commit(self):
        self.committed = True

    def rollback(self):
        pass


def test_sqlalchemy_repository_tracks_seen_entities():
    session = Mock()
    repo = SqlAlchemyRepository(session, model.Site)
    site = model.Site(name="Lab A")

    repo.add(site)
    session.add.assert_called_once_with(site)
    assert site in repo.seen

    repo.delete(site)
    session.delete.assert_called_once_with(site)
    assert site not in repo.seen


def test_get_of_missing_entity_is_not_tracked():
    session = Mock()
    session.get.return_value = None
    repo = SqlAlchemyRepository(session, model.Lot)

    assert repo.get(5) is None
    session.get.assert_called_once_with(model.Lot, 5)
    assert repo.seen == set()


def test_collect_new_events_drains_entity_events():
    uow = FakeUnitOfWork()
    record = model.InventoryRecord(
        lot_id=1, site_id=1, quantity_on_hand=4, recorded_date=date(2024, 1, 1), recorded_by="Eve"
    )
    record.record()
    uow.inventory_records.add(record)

    events = list(uow.collect_new_events())

    assert [type(e) for e in events] == [InventoryRecorded]
    assert record.events == []
    assert list(uow.collect_new_events()) == []


def test_record_inventory_commits_and_returns_id():
    uow = FakeUnitOfWork()

    [record_id] = messagebus.handle(
        commands.RecordInventory(lot_id=1, site_id=1, quantity_on_hand=4,
                                 recorded_date=date(2024, 1, 1), recorded_by="Eve"),
        uow,
    )

    assert uow.committed
    assert uow.inventory_records.get(record_id).quantity_on_hand == 4


def test_missing_lot_raises_and_does_not_commit():
    uow = FakeUnitOfWork()

    with pytest.raises(NotFound):
        messagebus.handle(
            commands.RecordShipment(lot_id=9, site_id=1, quantity=5, shipped_date=date(2024, 1, 1)), uow
        )
    assert not uow.committed
