"""
Service d'analyse des checklists / Checklist analytics service.
Calcul pur sur un instantane des checklists et vehicules, sans verrou.
Pure computation over a snapshot of checklists and vehicles, no locking.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable
from zoneinfo import ZoneInfo

from fleetcheck.models.vehicle import VehicleStatus
from fleetcheck.models.vehicle_checklist import ChecklistStatus
from fleetcheck.services.value_normalizer import notes_of, parse_inspection


@dataclass
class VehicleStats:
    vehicle_id: int
    plate: str
    model: str
    total_checklists: int
    total_km: float
    avg_km_per_trip: float
    checklists: list[Any] = field(default_factory=list)


@dataclass
class FleetSummary:
    completeness_rate: float
    open_count: int
    closed_count: int
    avg_km_per_trip: float
    active_vehicles_with_open: int
    daily_trend: list[dict] = field(default_factory=list)


def _status_value(status: Any) -> str:
    return status.value if isinstance(status, ChecklistStatus) else str(status)


def _parse_moment(value: Any) -> datetime | None:
    """Horodatage ISO-8601 (ou datetime), None si illisible / ISO-8601 timestamp (or datetime), None if unreadable."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


class ChecklistAnalyticsService:
    """Statistiques de flotte / Fleet statistics."""

    @staticmethod
    def local_date(value: Any, tz: ZoneInfo) -> date | None:
        """Date calendaire dans le fuseau de reference / Calendar date in the reference zone.

        Une date sans fuseau est consideree deja locale. None si illisible.
        A naive timestamp is taken as already local. None if unreadable.
        """
        moment = _parse_moment(value)
        if moment is None:
            return None
        if moment.tzinfo is None:
            return moment.date()
        return moment.astimezone(tz).date()

    @staticmethod
    def filter_by_date(
        checklists: Iterable[Any],
        start: date | None,
        end: date | None,
        tz: ZoneInfo = ZoneInfo("UTC"),
    ) -> list[Any]:
        """Filtre inclusif sur la date de sortie / Inclusive filter on the start date."""
        checklists = list(checklists)
        if start is None and end is None:
            return checklists

        kept = []
        for checklist in checklists:
            day = ChecklistAnalyticsService.local_date(checklist.start_date, tz)
            if day is None:
                continue
            if start is not None and day < start:
                continue
            if end is not None and day > end:
                continue
            kept.append(checklist)
        return kept

    @staticmethod
    def start_instant(checklist: Any, tz: ZoneInfo) -> float:
        """Instant de sortie pour le tri (illisible en dernier) / Exit instant for sorting (unreadable last)."""
        moment = _parse_moment(checklist.start_date)
        if moment is None:
            return float("-inf")
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=tz)
        return moment.timestamp()

    @staticmethod
    def trip_distance(checklist: Any) -> float | None:
        """Distance d'un trajet complet, None sinon / Completed trip distance, else None."""
        if checklist.km_initial is None or checklist.km_final is None:
            return None
        start = float(checklist.km_initial)
        end = float(checklist.km_final)
        if end < start:
            return None
        return end - start

    @staticmethod
    def vehicle_stats(
        checklists: Iterable[Any],
        vehicles: Iterable[Any],
        tz: ZoneInfo = ZoneInfo("UTC"),
    ) -> list[VehicleStats]:
        """Statistiques par vehicule, triees par plaque / Per-vehicle stats sorted by plate.

        Les checklists d'un vehicule inconnu sont ignores.
        Checklists of an unknown vehicle are skipped.
        """
        by_id = {v.id: v for v in vehicles}
        groups: dict[int, list[Any]] = {}
        for checklist in checklists:
            groups.setdefault(checklist.vehicle_id, []).append(checklist)

        stats = []
        for vehicle_id, items in groups.items():
            vehicle = by_id.get(vehicle_id)
            if vehicle is None:
                continue
            items.sort(key=lambda c: ChecklistAnalyticsService.start_instant(c, tz), reverse=True)

            total_km = 0.0
            completed = 0
            for checklist in items:
                distance = ChecklistAnalyticsService.trip_distance(checklist)
                if distance is not None:
                    total_km += distance
                    completed += 1

            stats.append(VehicleStats(
                vehicle_id=vehicle_id,
                plate=vehicle.plate,
                model=vehicle.model,
                total_checklists=len(items),
                total_km=total_km,
                avg_km_per_trip=total_km / completed if completed else 0.0,
                checklists=items,
            ))

        stats.sort(key=lambda s: s.plate)
        return stats

    @staticmethod
    def is_non_compliant(checklist: Any) -> bool:
        """Checklist ferme avec observations de retour / Closed checklist with return notes."""
        if _status_value(checklist.status) != ChecklistStatus.CLOSED.value:
            return False
        return bool(notes_of(parse_inspection(checklist.inspection_end)))

    @staticmethod
    def fleet_summary(
        checklists: Iterable[Any],
        vehicles: Iterable[Any],
        tz: ZoneInfo = ZoneInfo("UTC"),
    ) -> FleetSummary:
        """Synthese de flotte sur l'ensemble filtre / Fleet roll-up over the filtered set."""
        checklists = list(checklists)
        closed = [c for c in checklists if _status_value(c.status) == ChecklistStatus.CLOSED.value]
        opened = [c for c in checklists if _status_value(c.status) == ChecklistStatus.OPEN.value]

        distances = [
            d for d in (ChecklistAnalyticsService.trip_distance(c) for c in checklists)
            if d is not None
        ]
        active_ids = {
            v.id for v in vehicles
            if v.status in (VehicleStatus.ACTIVE, VehicleStatus.ACTIVE.value)
        }

        days = Counter()
        for checklist in checklists:
            day = ChecklistAnalyticsService.local_date(checklist.start_date, tz)
            if day is not None:
                days[day] += 1

        return FleetSummary(
            completeness_rate=len(closed) / len(checklists) if checklists else 0.0,
            open_count=len(opened),
            closed_count=len(closed),
            avg_km_per_trip=sum(distances) / len(distances) if distances else 0.0,
            active_vehicles_with_open=len({c.vehicle_id for c in opened} & active_ids),
            daily_trend=[{"date": day.isoformat(), "count": days[day]} for day in sorted(days)],
        )


def reference_timezone(name: str) -> ZoneInfo:
    """Fuseau de reference, UTC si inconnu / Reference zone, UTC when unknown."""
    try:
        return ZoneInfo(name)
    except (KeyError, ValueError):
        return ZoneInfo("UTC")