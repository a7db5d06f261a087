import math
import re
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from config import settings
from database.connection import MongoStore, POPULARITY_INDEX, POPULARITY_ORDER, store_operation
from repositories.track_repository import serialize_track
from catalog.filters import TrackFilters, normalize_filters

logger = logging.getLogger("catalog.retrieval")

# Campos pesados que no necesita ninguna vista de listado
LISTING_EXCLUDED_FIELDS = ("album", "audio_analysis")
LISTING_PROJECTION = {f: 0 for f in LISTING_EXCLUDED_FIELDS}

POPULARITY_SORT = dict(POPULARITY_ORDER)
SEARCH_FIELDS = ("name", "artist_name")


# ============================================================
# 📄 Página de resultados
# ============================================================
@dataclass
class TrackPage:
    records: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = 1

    @property
    def pages(self) -> int:
        return total_pages(self.total, self.limit)

    def to_response(self) -> Dict[str, Any]:
        return {
            "tracks": self.records,
            "pagination": {"total": self.total, "page": self.page, "pages": self.pages},
        }


def total_pages(total: int, limit: int) -> int:
    if total <= 0:
        return 0
    return math.ceil(total / limit)


# ============================================================
# 🔹 Etapas del pipeline
# ============================================================
def text_search_stage(term: str, index_name: Optional[str] = None) -> Dict[str, Any]:
    """Autocomplete difuso (1 edición, orden secuencial) sobre nombre y artista."""
    return {
        "$search": {
            "index": index_name or settings.SEARCH_INDEX_NAME,
            "compound": {
                "should": [
                    {
                        "autocomplete": {
                            "query": term,
                            "path": path,
                            "tokenOrder": "sequential",
                            "fuzzy": {"maxEdits": 1},
                        }
                    }
                    for path in SEARCH_FIELDS
                ],
                "minimumShouldMatch": 1,
            },
        }
    }


def regex_search_predicate(term: str) -> Dict[str, Any]:
    pattern = re.escape(term)
    return {"$or": [{path: {"$regex": pattern, "$options": "i"}} for path in SEARCH_FIELDS]}


def paginate_stage(skip: int, limit: int, projection: Optional[Dict[str, int]] = None) -> Dict[str, Any]:
    """Conteo total y página en un único ``$facet`` (misma instantánea)."""
    records = [{"$skip": skip}, {"$limit": limit}]
    if projection:
        records.append({"$project": projection})
    return {"$facet": {"metadata": [{"$count": "total"}], "records": records}}


def build_text_pipeline(filters: TrackFilters, backend: Optional[str] = None,
                        projection: Optional[Dict[str, int]] = None) -> List[Dict[str, Any]]:
    """Modo texto: el orden de relevancia se conserva, los rangos sólo filtran."""
    backend = backend or settings.TEXT_SEARCH_BACKEND
    predicate = filters.range_predicate()

    if backend == "regex":
        match = regex_search_predicate(filters.search)
        match.update(predicate)
        pipeline = [{"$match": match}]
    else:
        pipeline = [text_search_stage(filters.search)]
        if predicate:
            pipeline.append({"$match": predicate})

    pipeline.append(paginate_stage(filters.skip, filters.limit, projection))
    return pipeline


def build_browse_pipeline(filters: TrackFilters,
                          projection: Optional[Dict[str, int]] = None) -> List[Dict[str, Any]]:
    """Modo navegación: sólo rangos activos, orden por popularidad descendente."""
    pipeline: List[Dict[str, Any]] = []
    predicate = filters.range_predicate()
    if predicate:
        pipeline.append({"$match": predicate})
    pipeline.append({"$sort": dict(POPULARITY_SORT)})
    pipeline.append(paginate_stage(filters.skip, filters.limit, projection))
    return pipeline


def build_pipeline(filters: TrackFilters, projection: Optional[Dict[str, int]] = None):
    """Devuelve ``(pipeline, opciones de aggregate)`` según el modo."""
    if filters.text_mode:
        return build_text_pipeline(filters, projection=projection), {}

    options = {}
    if not filters.active.any:
        options["hint"] = POPULARITY_INDEX
    return build_browse_pipeline(filters, projection=projection), options


# ============================================================
# 🔹 Ejecución
# ============================================================
def _unpack_facet(result: Optional[Dict[str, Any]]):
    if not result:
        return [], 0
    metadata = result.get("metadata") or []
    total = metadata[0].get("total", 0) if metadata else 0
    return result.get("records") or [], total


def run_page(store: MongoStore, filters: TrackFilters,
             projection: Optional[Dict[str, int]] = None) -> TrackPage:
    pipeline, options = build_pipeline(filters, projection)
    mode = "texto" if filters.text_mode else "navegación"
    logger.debug(f"🧪 Pipeline ({mode}): {pipeline} {options}")

    with store_operation("search_tracks"):
        result = next(iter(store.tracks.aggregate(pipeline, **options)), None)

    docs, total = _unpack_facet(result)
    records = [serialize_track(doc) for doc in docs]
    logger.info(f"🎵 Búsqueda ({mode}) -> {len(records)} de {total} tracks (página {filters.page})")
    return TrackPage(records=records, total=total, page=filters.page, limit=filters.limit)


def search_tracks(store: MongoStore, params: Dict[str, Any]) -> TrackPage:
    """Normaliza los parámetros crudos y devuelve la página correspondiente."""
    return run_page(store, normalize_filters(params), projection=LISTING_PROJECTION)


def list_all_tracks(store: MongoStore, cap: Optional[int] = None) -> TrackPage:
    """Listado masivo sin autenticación, siempre acotado al tope configurado."""
    cap = cap or settings.BULK_LISTING_CAP
    filters = replace(normalize_filters({}), limit=cap)
    return run_page(store, filters, projection=LISTING_PROJECTION)
