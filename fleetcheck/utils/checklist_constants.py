"""Configuration checklist par defaut / Built-in checklist configuration.

Items legacy (avant les templates), groupes et niveaux de carburant.
Legacy items (pre-template), groups and fuel levels.
"""

# (key, label) dans l'ordre d'affichage / in display order
LEGACY_GROUPS: list[tuple[str, str]] = [
    ("inspecao_veiculo", "Inspeção do Veículo"),
    ("seguranca_item", "Itens de Segurança"),
    ("documentos", "Documentos"),
    ("limpeza_organizacao", "Limpeza e Organização"),
]

# (key, label, group, column, order)
LEGACY_ITEMS: list[tuple[str, str, str, int, int]] = [
    # Inspeção do Veículo
    ("lataria", "Lataria (Amassados/Arranhões)", "inspecao_veiculo", 1, 1),
    ("pneus", "Pneus (Calibragem/Estado)", "inspecao_veiculo", 1, 2),
    ("vidros", "Vidros/Retrovisores", "inspecao_veiculo", 1, 3),
    ("farois_lanternas", "Faróis e Lanternas", "inspecao_veiculo", 1, 4),
    ("oleo_agua", "Nível de Óleo e Água", "inspecao_veiculo", 2, 5),
    ("painel", "Luzes do Painel", "inspecao_veiculo", 2, 6),
    ("ar_condicionado", "Ar Condicionado", "inspecao_veiculo", 2, 7),

    # Itens de Segurança
    ("cinto_seguranca", "Cinto de Segurança", "seguranca_item", 1, 8),
    ("extintor", "Extintor de Incêndio", "seguranca_item", 1, 9),
    ("macaco_chave", "Macaco e Chave de Roda", "seguranca_item", 1, 10),
    ("triangulo", "Triângulo de Sinalização", "seguranca_item", 2, 11),
    ("freio_mao", "Freio de Mão", "seguranca_item", 2, 12),

    # Documentos
    ("cnh", "CNH do Condutor", "documentos", 1, 13),
    ("documento_veiculo", "Documento do Veículo (CRLV)", "documentos", 1, 14),

    # Limpeza e Organização
    ("limpeza_interna", "Limpeza Interna", "limpeza_organizacao", 1, 15),
    ("limpeza_externa", "Limpeza Externa", "limpeza_organizacao", 1, 16),
]

GROUP_LABELS: dict[str, str] = dict(LEGACY_GROUPS)
GROUP_ORDER: list[str] = [key for key, _ in LEGACY_GROUPS]

# Prefixe des cles modernes / Modern key prefix
MODERN_KEY_PREFIX = "obs_"

# Cle reservee aux observations libres / Reserved free-text notes key
NOTES_KEY = "notes"

# niveau -> (position curseur 0..8, libelle) / level -> (slider step 0..8, label)
FUEL_LEVELS: dict[str, tuple[int, str]] = {
    "empty": (0, "Vazio"),
    "one_eighth": (1, "1/8"),
    "quarter": (2, "1/4"),
    "three_eighths": (3, "3/8"),
    "half": (4, "1/2"),
    "five_eighths": (5, "5/8"),
    "three_quarters": (6, "3/4"),
    "seven_eighths": (7, "7/8"),
    "full": (8, "Cheio"),
    # Synonymes legacy / Legacy synonyms
    "reserve": (1, "Reserva"),
    "low": (2, "Baixo (1/4)"),
}


def fuel_level_label(level: str | None) -> str:
    """Libelle d'affichage / Display label ("-" if unknown)."""
    if not level:
        return "-"
    entry = FUEL_LEVELS.get(level)
    return entry[1] if entry else level
