"""
Spending category catalog
Ids match the ones the chat channels assign when an expense is logged.
"""

from typing import Dict, Optional

UNCATEGORIZED = 'otros'

# Values seen from older channel versions that mean "no category"
UNCATEGORIZED_ALIASES = {'', 'uncategorized', 'sin_categoria', 'none', 'null'}

CATEGORIES: Dict[str, Dict[str, str]] = {
    'personales': {'label': 'Artículos personales', 'color': '#a3e635'},
    'comida': {'label': 'Comida', 'color': '#f97373'},
    'creditos': {'label': 'Créditos', 'color': '#6366f1'},
    'educacion': {'label': 'Educación', 'color': '#eab308'},
    'finanzas': {'label': 'Finanzas', 'color': '#a855f7'},
    'hogar': {'label': 'Hogar', 'color': '#ec4899'},
    'mascotas': {'label': 'Mascotas', 'color': '#f97316'},
    'mercado': {'label': 'Mercado', 'color': '#facc15'},
    'ocio': {'label': 'Ocio', 'color': '#2dd4bf'},
    'regalos': {'label': 'Regalos', 'color': '#0ea5e9'},
    'ropa': {'label': 'Ropa', 'color': '#10b981'},
    'salud': {'label': 'Salud', 'color': '#38bdf8'},
    'servicios': {'label': 'Servicios', 'color': '#22c55e'},
    'transporte': {'label': 'Transporte', 'color': '#fb923c'},
    'otros': {'label': 'Otros', 'color': '#9ca3af'},
}


def normalize_category_id(category_id: Optional[str]) -> str:
    """
    Normalize a raw category id

    Args:
        category_id: Id as stored, possibly None or an "uncategorized" marker

    Returns:
        The trimmed id, or UNCATEGORIZED when missing
    """
    if category_id is None:
        return UNCATEGORIZED

    cleaned = str(category_id).strip()
    if cleaned.lower() in UNCATEGORIZED_ALIASES:
        return UNCATEGORIZED
    return cleaned


def category_label(category_id: Optional[str]) -> str:
    """Human label for a category; unknown ids are shown as-is."""
    key = normalize_category_id(category_id)
    config = CATEGORIES.get(key)
    return config['label'] if config else key
