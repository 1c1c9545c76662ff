# pylint: disable=redefined-outer-name
import pytest
import redis
import requests
import fakeredis
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from tenacity import retry, stop_after_delay

from config import get_api_url, get_redis_host_and_port, get_reports_api_url

pytest.register_assert_rewrite("tests.e2e.api_client")


@retry(stop=stop_after_delay(60))
def wait_for_webapp_to_come_up():
    return requests.get(f"{get_api_url()}/health", timeout=1)


@retry(stop=stop_after_delay(60))
def wait_for_reports_api_to_come_up():
    return requests.get(f"{get_reports_api_url()}/health", timeout=1)


@retry(stop=stop_after_delay(30))
def wait_for_redis_to_come_up():
    r = redis.Redis(**get_redis_host_and_port())
    return r.ping()


@pytest.fixture
def running_apis():
    wait_for_webapp_to_come_up()
    wait_for_reports_api_to_come_up()


@pytest.fixture
def redis_client():
    wait_for_redis_to_come_up()
    return redis.Redis(**get_redis_host_and_port())


@pytest.fixture(autouse=True)
def fake_redis(monkeypatch):
    """Route movement-event publishing to an in-process fake Redis."""
    from reagent_inventory.adapters import redis_adapter

    fake = fakeredis.FakeRedis()
    monkeypatch.setattr(redis_adapter, "r", fake)
    return fake


@pytest.fixture
def sqlite_session_factory():
    """Create SQLite in-memory database for fast testing.

    StaticPool keeps one connection so every session (and the TestClient
    worker thread) sees the same in-memory database.
    """
    from reagent_inventory.adapters import orm

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    orm.metadata.create_all(engine)
    orm.start_mappers()

    yield sessionmaker(bind=engine)

    orm.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def uow(sqlite_session_factory):
    from reagent_inventory.service_layer.unit_of_work import SqlAlchemyUnitOfWork

    return SqlAlchemyUnitOfWork(sqlite_session_factory)


@pytest.fixture
def catalog(uow):
    """Two active sites, one reagent and one lot, created through the message bus."""
    from datetime import date
    from reagent_inventory.domain import commands
    from reagent_inventory.service_layer import messagebus

    def dispatch(cmd):
        return messagebus.handle(cmd, uow)[0]

    lab_a = dispatch(commands.CreateSite(name="Lab A", location="Building 1, Floor 2"))
    lab_b = dispatch(commands.CreateSite(name="Lab B", location="Building 1, Floor 3"))
    ethanol = dispatch(commands.CreateReagent(name="Ethanol", description="95% ethyl alcohol"))
    lot = dispatch(
        commands.CreateLot(lot_number="LOT101", reagent_id=ethanol, expiration_date=date(2024, 12, 31))
    )
    return dict(lab_a=lab_a, lab_b=lab_b, reagent=ethanol, lot=lot, dispatch=dispatch)
