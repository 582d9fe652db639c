"""
Seed des types de vehicule / Vehicle type seeding.
Crée les types par défaut au premier démarrage si la table est vide.
Creates default vehicle types on first startup if the table is empty.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetcheck.models.vehicle_type import VehicleType

logger = logging.getLogger(__name__)

# Sans template : checklist legacy / No template: legacy checklist
DEFAULT_VEHICLE_TYPES = [
    ("Carro", "Veículo de passeio"),
    ("Caminhonete", "Picape / utilitário"),
    ("Caminhão", "Veículo de carga"),
    ("Motocicleta", "Motocicleta"),
]


async def seed_vehicle_types(session: AsyncSession) -> None:
    """Créer les types par défaut si aucun n'existe / Create default types if none exist."""
    count = await session.scalar(select(func.count(VehicleType.id)))

    if count == 0:
        for name, description in DEFAULT_VEHICLE_TYPES:
            session.add(VehicleType(name=name, description=description))
        await session.commit()
        logger.info("Default vehicle types created: %s", ", ".join(n for n, _ in DEFAULT_VEHICLE_TYPES))
    else:
        logger.info("%s existing vehicle type(s), seed skipped", count)
