"""Fixtures de test / Test fixtures.

Base SQLite fichier par test (une connexion par session, comme en prod).
Per-test SQLite file database (one connection per session, as in prod).
"""

import json

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import fleetcheck.models  # noqa: F401
from fleetcheck.api.deps import get_legacy_settings, get_view_cache
from fleetcheck.database import Base, enable_sqlite_foreign_keys, get_db
from fleetcheck.main import app
from fleetcheck.models.app_setting import AppSetting
from fleetcheck.models.checklist_template import ChecklistTemplate, ChecklistTemplateItem
from fleetcheck.models.vehicle import Vehicle, VehicleStatus
from fleetcheck.models.vehicle_type import VehicleType
from fleetcheck.rate_limit import limiter
from fleetcheck.services.checklist_service import ChecklistService
from fleetcheck.services.legacy_settings import LegacySettingsProvider, db_loader
from fleetcheck.services.template_resolver import TemplateResolver
from fleetcheck.services.view_cache import ViewCache
from fleetcheck.utils.checklist_constants import LEGACY_ITEMS


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def view_cache():
    return ViewCache(ttl_seconds=60)


@pytest.fixture
def legacy_settings(session_factory):
    return LegacySettingsProvider(db_loader(session_factory, "obs_config"), ttl_seconds=60, timeout_seconds=1)


@pytest.fixture
def resolver(legacy_settings):
    return TemplateResolver(legacy_settings)


@pytest.fixture
def service(resolver, view_cache):
    return ChecklistService(resolver, view_cache)


@pytest.fixture
async def client(session_factory, view_cache, legacy_settings):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_view_cache] = lambda: view_cache
    app.dependency_overrides[get_legacy_settings] = lambda: legacy_settings
    limiter.enabled = False
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
    limiter.enabled = True


# --- Donnees / Data helpers ---

async def add_vehicle(db, plate="ABC1D23", vehicle_type_id=None, status=VehicleStatus.ACTIVE, mileage=0.0):
    vehicle = Vehicle(
        plate=plate, brand="Fiat", model="Strada", year=2022,
        status=status, vehicle_type_id=vehicle_type_id, mileage=mileage,
    )
    db.add(vehicle)
    await db.commit()
    return vehicle


async def add_template(db, name="Caminhão", items=()):
    """items: (label, group) dans l'ordre / in order."""
    template = ChecklistTemplate(name=name, active=True)
    db.add(template)
    await db.flush()
    for order, (label, group) in enumerate(items, 1):
        db.add(ChecklistTemplateItem(
            checklist_template_id=template.id, label=label, group=group, column=1, order=order,
        ))
    await db.commit()
    return template


async def add_vehicle_type(db, name="Carro", template_id=None):
    vtype = VehicleType(name=name, checklist_template_id=template_id)
    db.add(vtype)
    await db.commit()
    return vtype


async def set_obs_config(db, descriptors):
    db.add(AppSetting(key="obs_config", value=json.dumps(descriptors)))
    await db.commit()


def legacy_answers(value=True, **overrides):
    """Reponse complete pour les items legacy integres / Full answer for built-in legacy items."""
    answers = {key: value for key, *_ in LEGACY_ITEMS}
    answers.update(overrides)
    return answers
