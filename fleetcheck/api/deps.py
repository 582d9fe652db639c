"""
Dépendances partagées des routes / Shared route dependencies.
Injectées dans les routes via Depends() ; remplaçables dans les tests
via app.dependency_overrides.
Injected into routes via Depends(); replaceable in tests through
app.dependency_overrides.
"""

from fastapi import Depends

from fleetcheck.config import settings
from fleetcheck.database import async_session
from fleetcheck.services.checklist_service import ChecklistService
from fleetcheck.services.legacy_settings import LegacySettingsProvider, db_loader, http_loader
from fleetcheck.services.template_resolver import TemplateResolver
from fleetcheck.services.view_cache import ViewCache

_view_cache = ViewCache(ttl_seconds=settings.VIEW_CACHE_TTL_SECONDS)

# Source distante si configuree, sinon table app_settings
# Remote source when configured, else the app_settings table
if settings.LEGACY_SETTINGS_URL:
    _legacy_loader = http_loader(settings.LEGACY_SETTINGS_URL, settings.LEGACY_SETTINGS_TIMEOUT_SECONDS)
else:
    _legacy_loader = db_loader(async_session, settings.LEGACY_SETTINGS_KEY)

_legacy_settings = LegacySettingsProvider(
    loader=_legacy_loader,
    ttl_seconds=settings.LEGACY_SETTINGS_TTL_SECONDS,
    timeout_seconds=settings.LEGACY_SETTINGS_TIMEOUT_SECONDS,
)


def get_view_cache() -> ViewCache:
    return _view_cache


def get_legacy_settings() -> LegacySettingsProvider:
    return _legacy_settings


def get_template_resolver(
    legacy_settings: LegacySettingsProvider = Depends(get_legacy_settings),
) -> TemplateResolver:
    return TemplateResolver(legacy_settings)


def get_checklist_service(
    resolver: TemplateResolver = Depends(get_template_resolver),
    view_cache: ViewCache = Depends(get_view_cache),
) -> ChecklistService:
    return ChecklistService(resolver, view_cache)
