# pylint: disable=attribute-defined-outside-init
from __future__ import annotations
import abc
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session


import config
from reagent_inventory.adapters import repository
from reagent_inventory.domain import model


class AbstractUnitOfWork(abc.ABC):
    sites: repository.AbstractRepository[model.Site]
    reagents: repository.AbstractRepository[model.Reagent]
    lots: repository.AbstractRepository[model.Lot]
    shipments: repository.AbstractRepository[model.Shipment]
    transfers: repository.AbstractRepository[model.Transfer]
    inventory_records: repository.AbstractRepository[model.InventoryRecord]

    def __enter__(self) -> AbstractUnitOfWork:
        return self

    def __exit__(self, *args):
        self.rollback()

    def commit(self):
        self._commit()

    def collect_new_events(self):
        for repo in (self.shipments, self.transfers, self.inventory_records):
            for entity in repo.seen:
                while entity.events:
                    yield entity.events.pop(0)

    @abc.abstractmethod
    def _commit(self):
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self):
        raise NotImplementedError


def _default_engine():
    uri = config.get_database_uri()
    if uri.startswith("postgresql"):
        return create_engine(uri, isolation_level="REPEATABLE READ")
    return create_engine(uri)


DEFAULT_ENGINE = _default_engine()
DEFAULT_SESSION_FACTORY = sessionmaker(bind=DEFAULT_ENGINE)


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session_factory=DEFAULT_SESSION_FACTORY):
        self.session_factory = session_factory

    def __enter__(self):
        self.session = self.session_factory()  # type: Session
        self.sites = repository.SqlAlchemyRepository(self.session, model.Site)
        self.reagents = repository.SqlAlchemyRepository(self.session, model.Reagent)
        self.lots = repository.SqlAlchemyRepository(self.session, model.Lot)
        self.shipments = repository.SqlAlchemyRepository(self.session, model.Shipment)
        self.transfers = repository.SqlAlchemyRepository(self.session, model.Transfer)
        self.inventory_records = repository.SqlAlchemyRepository(self.session, model.InventoryRecord)
        return super().__enter__()

    def __exit__(self, *args):
        super().__exit__(*args)
        self.session.close()

    def _commit(self):
        self.session.commit()

    def rollback(self):
        self.session.rollback()
