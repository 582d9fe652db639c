"""
Service d'export CSV/Excel / CSV/Excel export service.
Génère des fichiers CSV et XLSX à partir de listes de dictionnaires.
"""

import csv
import io

from openpyxl import Workbook
from openpyxl.styles import Font

from fleetcheck.services.checklist_analytics import ChecklistAnalyticsService, VehicleStats
from fleetcheck.utils.checklist_constants import fuel_level_label

# Colonnes de l'export par vehicule / Per-vehicle export columns
VEHICLE_REPORT_FIELDS = [
    "plate",
    "model",
    "total_checklists",
    "total_km",
    "avg_km_per_trip",
    "checklist_id",
    "status",
    "start_date",
    "end_date",
    "km_initial",
    "km_final",
    "fuel_level_start",
    "fuel_level_end",
    "non_compliant",
]


class ExportService:
    """Export de données vers CSV/XLSX / Data export to CSV/XLSX."""

    @staticmethod
    def vehicle_report_rows(stats: list[VehicleStats]) -> list[dict]:
        """Une ligne par checklist, totaux du vehicule repetes / One row per checklist, vehicle totals repeated."""
        rows = []
        for vs in stats:
            totals = {
                "plate": vs.plate,
                "model": vs.model,
                "total_checklists": vs.total_checklists,
                "total_km": round(vs.total_km, 1),
                "avg_km_per_trip": round(vs.avg_km_per_trip, 1),
            }
            for c in vs.checklists:
                rows.append({
                    **totals,
                    "checklist_id": c.id,
                    "status": c.status.value,
                    "start_date": c.start_date,
                    "end_date": c.end_date,
                    "km_initial": c.km_initial,
                    "km_final": c.km_final,
                    "fuel_level_start": fuel_level_label(c.fuel_level_start),
                    "fuel_level_end": fuel_level_label(c.fuel_level_end),
                    "non_compliant": "true" if ChecklistAnalyticsService.is_non_compliant(c) else "false",
                })
        return rows

    @staticmethod
    def to_csv(rows: list[dict], fields: list[str]) -> bytes:
        """Générer un CSV UTF-8 BOM avec séparateur ';' / Generate UTF-8 BOM CSV with ';' separator."""
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=fields, delimiter=";", extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow({f: row.get(f, "") for f in fields})
        return ("\ufeff" + output.getvalue()).encode("utf-8")

    @staticmethod
    def to_xlsx(rows: list[dict], fields: list[str], sheet_name: str = "Data") -> bytes:
        """Générer un fichier Excel / Generate an Excel file."""
        wb = Workbook()
        ws = wb.active
        ws.title = sheet_name

        # En-têtes / Headers
        for col_idx, field in enumerate(fields, 1):
            cell = ws.cell(row=1, column=col_idx, value=field)
            cell.font = Font(bold=True)

        # Données / Data rows
        for row_idx, row in enumerate(rows, 2):
            for col_idx, field in enumerate(fields, 1):
                ws.cell(row=row_idx, column=col_idx, value=row.get(field))

        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()
