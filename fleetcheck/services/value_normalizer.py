"""Normalisation des valeurs d'inspection / Inspection value normalization.

Seul endroit qui interprete les valeurs brutes (bool ou texte) stockees
dans les mappings d'inspection.
Single place interpreting raw values (bool or text) stored in inspection mappings.
"""

import enum
import json
from typing import Any

TRUTHY_MARKERS = frozenset({"true"})
NEGATIVE_MARKERS = frozenset({"false", "nao", "não", "n"})


class InspectionValue(str, enum.Enum):
    """Resultat tri-etat / Tri-state result."""
    CHECKED = "checked"
    NEGATIVE = "negative"
    UNSET = "unset"


def normalize_value(raw: Any) -> InspectionValue:
    """Interpreter une valeur brute / Interpret a raw value. Never raises."""
    if raw is True:
        return InspectionValue.CHECKED
    if raw is False:
        return InspectionValue.NEGATIVE
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text in TRUTHY_MARKERS:
            return InspectionValue.CHECKED
        if text in NEGATIVE_MARKERS:
            return InspectionValue.NEGATIVE
    return InspectionValue.UNSET


def parse_inspection(raw: Any) -> dict[str, Any]:
    """Decoder un mapping stocke / Decode a stored mapping.

    Texte JSON ou dict. Toute donnee illisible donne {}.
    JSON text or dict. Anything unreadable yields {}.
    """
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, (str, bytes)) or not raw:
        return {}
    try:
        data = json.loads(raw)
    except (ValueError, TypeError):
        return {}
    return data if isinstance(data, dict) else {}


def notes_of(mapping: dict[str, Any]) -> str:
    """Observations libres nettoyees / Trimmed free-text notes ("" if absent)."""
    notes = mapping.get("notes")
    if not isinstance(notes, str):
        return ""
    return notes.strip()
