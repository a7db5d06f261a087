import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional

from config import settings
from database.connection import MongoStore, POPULARITY_ORDER, store_operation
from catalog.utils import (
    ms_to_minutes,
    percentage,
    rename_group_key,
    round_metric,
    unit_to_percent,
)

logger = logging.getLogger("catalog.aggregations")

TOP_TRACK_FIELDS = ("name", "artist_name", "popularity", "genre")
DASHBOARD_TRACK_FIELDS = ("popularity", "energy", "danceability", "valence", "duration_ms")
ARTIST_SORT_KEYS = ("track_count", "avg_popularity")


def _aggregate(store: MongoStore, operation: str, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    with store_operation(operation):
        return list(store.tracks.aggregate(pipeline))


def _with_cap(pipeline: List[Dict[str, Any]], limit: Optional[int]) -> List[Dict[str, Any]]:
    if limit:
        pipeline.append({"$limit": limit})
    return pipeline


# ============================================================
# 🎼 Estadísticas por género
# ============================================================
def genre_stats_pipeline(limit: Optional[int] = None) -> List[Dict[str, Any]]:
    pipeline = [
        {
            "$group": {
                "_id": "$genre",
                "count": {"$sum": 1},
                "avg_tempo": {"$avg": "$tempo"},
                "avg_energy": {"$avg": "$energy"},
                "avg_popularity": {"$avg": "$popularity"},
                "avg_danceability": {"$avg": "$danceability"},
            }
        },
        {"$sort": {"count": -1, "_id": 1}},
    ]
    return _with_cap(pipeline, limit)


def shape_genre_stats(rows: List[Dict[str, Any]], decimals: Optional[int] = None) -> List[Dict[str, Any]]:
    decimals = settings.AVERAGE_DECIMALS if decimals is None else decimals
    shaped = []
    for row in rows:
        row = rename_group_key(row, "genre")
        shaped.append({
            "genre": row["genre"],
            "count": row.get("count", 0),
            "avg_tempo": round_metric(row.get("avg_tempo"), decimals),
            "avg_energy": round_metric(row.get("avg_energy"), decimals),
            "avg_popularity": round_metric(row.get("avg_popularity"), decimals),
            "avg_danceability": round_metric(row.get("avg_danceability"), decimals),
        })
    return shaped


def genre_stats(store: MongoStore, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Conteo y promedios por género, de mayor a menor cantidad de tracks."""
    return shape_genre_stats(_aggregate(store, "genre_stats", genre_stats_pipeline(limit)))


# ============================================================
# 🎤 Estadísticas por artista
# ============================================================
def artist_stats_pipeline(limit: Optional[int] = None, sort_by: str = "track_count") -> List[Dict[str, Any]]:
    if sort_by not in ARTIST_SORT_KEYS:
        raise ValueError(f"Orden de artistas no soportado: {sort_by}")
    secondary = "avg_popularity" if sort_by == "track_count" else "track_count"
    pipeline = [
        {
            "$group": {
                "_id": "$artist_name",
                "track_count": {"$sum": 1},
                "avg_popularity": {"$avg": "$popularity"},
            }
        },
        {"$sort": {sort_by: -1, secondary: -1, "_id": 1}},
    ]
    return _with_cap(pipeline, limit)


def artist_stats(store: MongoStore, limit: Optional[int] = None,
                 sort_by: str = "track_count") -> List[Dict[str, Any]]:
    """
    Tracks y popularidad media por ``artist_name``.

    Un ``artist_name`` en forma de lista agrupa como una única clave: el valor
    se devuelve tal cual, sin aplanar.
    """
    rows = _aggregate(store, "artist_stats", artist_stats_pipeline(limit, sort_by))
    return [
        {
            "artist_name": row["artist_name"],
            "track_count": row.get("track_count", 0),
            "avg_popularity": round_metric(row.get("avg_popularity"), settings.AVERAGE_DECIMALS),
        }
        for row in (rename_group_key(r, "artist_name") for r in rows)
    ]


# ============================================================
# ⭐ Top por popularidad
# ============================================================
def top_popular(store: MongoStore, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    limit = limit or settings.TOP_POPULAR_LIMIT
    projection = {f: 1 for f in TOP_TRACK_FIELDS}
    with store_operation("top_popular"):
        docs = list(store.tracks.find({}, projection).sort(POPULARITY_ORDER).limit(limit))
    return [
        {"id": str(doc["_id"]), **{f: doc.get(f) for f in TOP_TRACK_FIELDS}}
        for doc in docs
    ]


# ============================================================
# 🔞 Contenido explícito
# ============================================================
EXPLICIT_FLAG = {"$cond": [{"$eq": ["$explicit", True]}, 1, 0]}


def explicit_stats(store: MongoStore) -> Dict[str, int]:
    """Total, explícitos y porcentaje entero en una sola consulta."""
    pipeline = [
        {"$group": {"_id": None, "total": {"$sum": 1}, "explicit": {"$sum": EXPLICIT_FLAG}}},
    ]
    rows = _aggregate(store, "explicit_stats", pipeline)
    total = rows[0].get("total", 0) if rows else 0
    explicit = rows[0].get("explicit", 0) if rows else 0
    return {
        "totalTracks": total,
        "explicitCount": explicit,
        "explicitPercentage": percentage(explicit, total),
    }


def explicit_by_genre_pipeline(limit: Optional[int] = None) -> List[Dict[str, Any]]:
    pipeline = [
        {
            "$group": {
                "_id": "$genre",
                "total_count": {"$sum": 1},
                "explicit_count": {"$sum": EXPLICIT_FLAG},
            }
        },
        {
            "$addFields": {
                "explicit_ratio": {"$divide": ["$explicit_count", "$total_count"]},
            }
        },
        {"$sort": {"explicit_ratio": -1, "_id": 1}},
    ]
    return _with_cap(pipeline, limit)


def explicit_by_genre(store: MongoStore, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Géneros con mayor proporción de tracks explícitos."""
    limit = limit or settings.EXPLICIT_BY_GENRE_CAP
    rows = _aggregate(store, "explicit_by_genre", explicit_by_genre_pipeline(limit))
    return [
        {
            "genre": row["genre"],
            "total_count": row["total_count"],
            "explicit_count": row["explicit_count"],
            "explicit_percentage": percentage(
                row["explicit_count"], row["total_count"], settings.PERCENTAGE_DECIMALS
            ),
        }
        for row in (rename_group_key(r, "genre") for r in rows)
    ]


# ============================================================
# 📊 Distribución de popularidad
# ============================================================
def popularity_distribution(store: MongoStore) -> List[Dict[str, Any]]:
    pipeline = [
        {"$group": {"_id": "$popularity", "count": {"$sum": 1}}},
        {"$sort": {"_id": 1}},
    ]
    rows = _aggregate(store, "popularity_distribution", pipeline)
    return [{"popularity": row["_id"], "count": row["count"]} for row in rows]


# ============================================================
# 📈 Métricas medias globales
# ============================================================
def average_metrics(store: MongoStore) -> Dict[str, Optional[float]]:
    pipeline = [
        {
            "$group": {
                "_id": None,
                "avgPopularity": {"$avg": "$popularity"},
                "avgDuration": {"$avg": "$duration_ms"},
                "avgEnergy": {"$avg": "$energy"},
                "avgDanceability": {"$avg": "$danceability"},
                "avgTempo": {"$avg": "$tempo"},
            }
        }
    ]
    rows = _aggregate(store, "average_metrics", pipeline)
    doc = rows[0] if rows else {}
    return {k: doc.get(k) for k in ("avgPopularity", "avgDuration", "avgEnergy", "avgDanceability", "avgTempo")}


def count_tracks(store: MongoStore) -> int:
    with store_operation("count_tracks"):
        return store.tracks.count_documents({})


def dashboard_tracks(store: MongoStore, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Sólo los rasgos numéricos de cada track, para los gráficos de análisis."""
    limit = limit or settings.BULK_LISTING_CAP
    projection = {f: 1 for f in DASHBOARD_TRACK_FIELDS}
    with store_operation("dashboard_tracks"):
        docs = list(store.tracks.find({}, projection).limit(limit))
    return [{"id": str(doc["_id"]), **{f: doc.get(f) for f in DASHBOARD_TRACK_FIELDS}} for doc in docs]


# ============================================================
# 🧭 Snapshot compuesto del dashboard
# ============================================================
def run_concurrently(tasks: Dict[str, Callable[[], Any]], max_workers: Optional[int] = None) -> Dict[str, Any]:
    """
    Ejecuta tareas independientes en paralelo y espera a todas.

    Ante el primer fallo cancela lo pendiente y propaga esa excepción: nunca
    se devuelve un resultado parcial.
    """
    workers = max_workers or min(len(tasks), settings.DASHBOARD_WORKERS) or 1
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(fn): name for name, fn in tasks.items()}
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        failed = next((f for f in done if f.exception() is not None), None)
        if failed is not None:
            for f in pending:
                f.cancel()
            logger.error(f"❌ Subconsulta '{futures[failed]}' falló, se aborta el snapshot.")
            raise failed.exception()
        return {name: f.result() for f, name in futures.items()}


def dashboard_snapshot(store: MongoStore) -> Dict[str, Any]:
    results = run_concurrently({
        "total": lambda: count_tracks(store),
        "averages": lambda: average_metrics(store),
        "genres": lambda: genre_stats(store, settings.DASHBOARD_GENRE_CAP),
        "artists": lambda: artist_stats(store, settings.DASHBOARD_ARTIST_CAP, sort_by="avg_popularity"),
        "top": lambda: top_popular(store, settings.DASHBOARD_TOP_TRACKS),
        "explicit": lambda: explicit_stats(store),
        "explicit_by_genre": lambda: explicit_by_genre(store, settings.EXPLICIT_BY_GENRE_CAP),
    })

    total = results["total"]
    averages = results["averages"]
    genres = results["genres"]
    explicit = results["explicit"]
    logger.info(f"📊 Snapshot del dashboard listo ({total} tracks, {len(genres)} géneros)")

    return {
        "totalTracks": total,
        "totalGenres": len(genres),
        "avgPopularity": round_metric(averages["avgPopularity"], None),
        "avgDuration": ms_to_minutes(averages["avgDuration"]),
        "avgEnergy": unit_to_percent(averages["avgEnergy"]),
        "avgDanceability": unit_to_percent(averages["avgDanceability"]),
        "avgTempo": round_metric(averages["avgTempo"], None),
        "explicitCount": explicit["explicitCount"],
        "explicitPercentage": percentage(explicit["explicitCount"], total),
        "topGenre": genres[0]["genre"] if genres else "N/A",
        "stats": genres,
        "artistStats": results["artists"],
        "topTracks": results["top"],
        "explicitByGenre": results["explicit_by_genre"],
    }
