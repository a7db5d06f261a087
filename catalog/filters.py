import math
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from config import settings

logger = logging.getLogger("catalog.filters")

# ============================================================
# 📐 Dominios de los filtros de rango
# ============================================================
ENERGY_DOMAIN = (0.0, 1.0)
DANCEABILITY_DOMAIN = (0.0, 1.0)
POPULARITY_DOMAIN = (0, 100)

DEFAULT_PAGE = 1

# Rango representable por un entero BSON de 8 bytes
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


# ============================================================
# 🔹 Parseo tolerante
# ============================================================
def parse_float(raw: Any) -> Optional[float]:
    """Número finito o ``None``; nunca lanza."""
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def parse_int(raw: Any) -> Optional[int]:
    """Entero truncado hacia cero ("70.9" → 70) o ``None`` si no cabe en int64."""
    value = parse_float(raw)
    if value is None or not INT64_MIN <= value <= INT64_MAX:
        return None
    return int(value)


# ============================================================
# 🧱 Estructuras normalizadas
# ============================================================
@dataclass(frozen=True)
class RangeFilter:
    field: str
    min: float
    max: float
    domain_min: float
    domain_max: float

    @property
    def active(self) -> bool:
        return self.min > self.domain_min or self.max < self.domain_max

    def predicate(self) -> Dict[str, Any]:
        return {"$gte": self.min, "$lte": self.max}


@dataclass(frozen=True)
class ActiveFilters:
    """Qué dimensiones deben viajar al store. Se calcula una sola vez."""

    energy: bool
    danceability: bool
    popularity: bool

    @property
    def any(self) -> bool:
        return self.energy or self.danceability or self.popularity


@dataclass(frozen=True)
class TrackFilters:
    search: str
    energy: RangeFilter
    danceability: RangeFilter
    popularity: RangeFilter
    active: ActiveFilters
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def text_mode(self) -> bool:
        return bool(self.search)

    def ranges(self):
        return (self.energy, self.danceability, self.popularity)

    def range_predicate(self) -> Dict[str, Any]:
        """Predicado conjuntivo sólo con las dimensiones activas."""
        flags = {
            "energy": self.active.energy,
            "danceability": self.active.danceability,
            "popularity": self.active.popularity,
        }
        return {r.field: r.predicate() for r in self.ranges() if flags[r.field]}


# ============================================================
# 🔹 Normalizador
# ============================================================
def _resolve_range(field: str, params: Mapping[str, Any], domain, parser: Callable) -> RangeFilter:
    lo, hi = domain
    raw_min = parser(params.get(f"{field}_min"))
    raw_max = parser(params.get(f"{field}_max"))
    return RangeFilter(
        field=field,
        min=lo if raw_min is None else raw_min,
        max=hi if raw_max is None else raw_max,
        domain_min=lo,
        domain_max=hi,
    )


def resolve_pagination(raw_page: Any, raw_limit: Any,
                       default_limit: Optional[int] = None,
                       max_limit: Optional[int] = None,
                       max_page: Optional[int] = None):
    """Devuelve ``(page, limit)`` saneados: 1 ≤ page ≤ max_page, 0 < limit ≤ max_limit."""
    default_limit = default_limit or settings.DEFAULT_PAGE_LIMIT
    max_limit = max_limit or settings.MAX_PAGE_LIMIT
    max_page = max_page or settings.MAX_PAGE_NUMBER

    # Una página enorme se recorta a max_page; skip siempre cabe en int64
    page = parse_float(raw_page)
    page = DEFAULT_PAGE if page is None else int(min(max(page, 1), max_page))

    limit = parse_int(raw_limit)
    if limit is None or limit <= 0:
        limit = default_limit
    return page, min(limit, max_limit)


def normalize_filters(params: Mapping[str, Any]) -> TrackFilters:
    """
    Convierte los parámetros crudos de la query en un filtro canónico.

    Los valores ausentes o no numéricos caen al límite del dominio; un rango
    que cubre todo su dominio queda inactivo y no se envía al store.
    """
    energy = _resolve_range("energy", params, ENERGY_DOMAIN, parse_float)
    danceability = _resolve_range("danceability", params, DANCEABILITY_DOMAIN, parse_float)
    popularity = _resolve_range("popularity", params, POPULARITY_DOMAIN, parse_int)

    active = ActiveFilters(
        energy=energy.active,
        danceability=danceability.active,
        popularity=popularity.active,
    )
    page, limit = resolve_pagination(params.get("page"), params.get("limit"))
    search = (params.get("search") or "").strip()

    logger.debug(f"🔎 Filtros normalizados: search={search!r} activos={active} page={page} limit={limit}")
    return TrackFilters(
        search=search,
        energy=energy,
        danceability=danceability,
        popularity=popularity,
        active=active,
        page=page,
        limit=limit,
    )
