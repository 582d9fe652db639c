"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour que Base.metadata les détecte.
Import all models here so Base.metadata can detect them.
"""

from fleetcheck.models.app_setting import AppSetting
from fleetcheck.models.audit import AuditLog
from fleetcheck.models.checklist_template import ChecklistTemplate, ChecklistTemplateItem
from fleetcheck.models.vehicle import FuelType, Vehicle, VehicleStatus
from fleetcheck.models.vehicle_checklist import ChecklistStatus, VehicleChecklist
from fleetcheck.models.vehicle_type import VehicleType

__all__ = [
    "AppSetting",
    "AuditLog",
    "ChecklistTemplate",
    "ChecklistTemplateItem",
    "FuelType",
    "Vehicle",
    "VehicleStatus",
    "ChecklistStatus",
    "VehicleChecklist",
    "VehicleType",
]
