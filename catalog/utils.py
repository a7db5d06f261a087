from typing import Any, Dict, Optional

MS_PER_MINUTE = 60000

# ============================================================
# 🔢 Presentación numérica (sólo en el borde de la respuesta)
# ============================================================

def safe_ratio(part: float, whole: float) -> float:
    """Proporción con protección contra división por cero."""
    return part / whole if whole else 0.0


def percentage(part: float, whole: float, decimals: Optional[int] = None):
    """``round(100 * part / whole)``; 0 cuando ``whole`` es 0."""
    return round(100 * safe_ratio(part, whole), decimals)


def round_metric(value: Optional[float], decimals: Optional[int] = 2):
    if value is None:
        return 0 if decimals is None else 0.0
    return round(value, decimals)


def ms_to_minutes(ms: Optional[float]) -> float:
    """Milisegundos a minutos con un decimal."""
    return round((ms or 0) / MS_PER_MINUTE, 1)


def unit_to_percent(value: Optional[float]) -> int:
    """Métrica en [0, 1] expresada como porcentaje entero."""
    return round((value or 0) * 100)


# ============================================================
# 🧩 Reformateo de grupos de Mongo
# ============================================================

def rename_group_key(doc: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Renombra ``_id`` de un ``$group`` al nombre estable de la respuesta."""
    out = dict(doc)
    out[key] = out.pop("_id", None)
    return out
