# backend/routes/dashboard_routes.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Annotated, Callable, Optional
import logging

from catalog import aggregations
from config import settings
from database.connection import MongoStore, UpstreamStoreError, get_store

router = APIRouter()
LOG = logging.getLogger("routes.dashboard")

CapQuery = Annotated[Optional[int], Query(ge=1, le=1000, description="Tope opcional de resultados")]


def _run(name: str, fn: Callable, *args, **kwargs):
    LOG.info(f"📊 Dashboard -> {name}")
    try:
        return fn(*args, **kwargs)
    except UpstreamStoreError:
        LOG.exception(f"❌ Error calculando {name}")
        raise HTTPException(status_code=500, detail="Error interno al calcular estadísticas.")

# ------------------------------------------------------------
# 🔹 Snapshot compuesto
# ------------------------------------------------------------
@router.get("/stats", summary="Estadísticas generales del dashboard")
def dashboard_stats(store: MongoStore = Depends(get_store)):
    return _run("stats", aggregations.dashboard_snapshot, store)

# ------------------------------------------------------------
# 🔹 Rasgos numéricos de todas las pistas
# ------------------------------------------------------------
@router.get("/all-tracks", summary="Rasgos numéricos de las pistas para análisis")
def all_tracks(limit: CapQuery = None, store: MongoStore = Depends(get_store)):
    return _run("all-tracks", aggregations.dashboard_tracks, store, limit)

# ------------------------------------------------------------
# 🔹 Estadísticas individuales
# ------------------------------------------------------------
@router.get("/genre-stats", summary="Estadísticas por género")
def genre_stats(limit: CapQuery = None, store: MongoStore = Depends(get_store)):
    return _run("genre-stats", aggregations.genre_stats, store, limit)

@router.get("/artist-stats", summary="Estadísticas de artistas")
def artist_stats(limit: CapQuery = None, store: MongoStore = Depends(get_store)):
    return _run("artist-stats", aggregations.artist_stats, store, limit or settings.ARTIST_STATS_CAP)

@router.get("/top-popular", summary="Top pistas populares")
def top_popular(limit: CapQuery = None, store: MongoStore = Depends(get_store)):
    return _run("top-popular", aggregations.top_popular, store, limit)

@router.get("/explicit-stats", summary="Estadísticas de contenido explícito")
def explicit_stats(store: MongoStore = Depends(get_store)):
    return _run("explicit-stats", aggregations.explicit_stats, store)

@router.get("/explicit-by-genre", summary="Contenido explícito por género")
def explicit_by_genre(limit: CapQuery = None, store: MongoStore = Depends(get_store)):
    return _run("explicit-by-genre", aggregations.explicit_by_genre, store, limit)

@router.get("/popularity-distribution", summary="Distribución de popularidad")
def popularity_distribution(store: MongoStore = Depends(get_store)):
    return _run("popularity-distribution", aggregations.popularity_distribution, store)
