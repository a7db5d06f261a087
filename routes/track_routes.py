# backend/routes/track_routes.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import logging

from auth.dependencies import require_admin
from catalog.retrieval import list_all_tracks, search_tracks
from database.connection import MongoStore, UpstreamStoreError, get_store
from models.track import TrackCreate, TrackUpdate
from repositories.track_repository import (
    create_track, get_track_by_id, update_track, delete_track
)

router = APIRouter()
LOG = logging.getLogger("routes.tracks")

STORE_FAILURE = "Error interno al consultar el catálogo."

# ------------------------------------------------------------
# 🔹 Listar tracks (búsqueda + filtros + paginación)
# ------------------------------------------------------------
@router.get("", summary="Listar pistas con filtros y paginación")
def list_tracks(
    search: Optional[str] = Query(None),
    energy_min: Optional[str] = Query(None),
    energy_max: Optional[str] = Query(None),
    danceability_min: Optional[str] = Query(None),
    danceability_max: Optional[str] = Query(None),
    popularity_min: Optional[str] = Query(None),
    popularity_max: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    store: MongoStore = Depends(get_store),
):
    # Los numéricos llegan como texto: un valor inválido equivale a "sin filtro"
    params = {
        "search": search,
        "energy_min": energy_min,
        "energy_max": energy_max,
        "danceability_min": danceability_min,
        "danceability_max": danceability_max,
        "popularity_min": popularity_min,
        "popularity_max": popularity_max,
        "page": page,
        "limit": limit,
    }
    try:
        return search_tracks(store, params).to_response()
    except UpstreamStoreError:
        LOG.exception("❌ Error listando tracks")
        raise HTTPException(status_code=500, detail=STORE_FAILURE)

# ------------------------------------------------------------
# 🔹 Listado masivo (acotado)
# ------------------------------------------------------------
@router.get("/all", summary="Obtener todas las pistas (limitado internamente)")
def list_all(store: MongoStore = Depends(get_store)):
    try:
        return list_all_tracks(store).to_response()
    except UpstreamStoreError:
        LOG.exception("❌ Error en listado masivo de tracks")
        raise HTTPException(status_code=500, detail=STORE_FAILURE)

# ------------------------------------------------------------
# 🔹 Obtener track por ID
# ------------------------------------------------------------
@router.get("/{track_id}", summary="Obtener pista por ID")
def get_track(track_id: str, store: MongoStore = Depends(get_store)):
    try:
        track = get_track_by_id(store, track_id)
    except UpstreamStoreError:
        LOG.exception(f"❌ Error obteniendo track {track_id}")
        raise HTTPException(status_code=500, detail=STORE_FAILURE)
    if not track:
        raise HTTPException(status_code=404, detail="Track no encontrado")
    return track

# ------------------------------------------------------------
# 🔹 Crear track
# ------------------------------------------------------------
@router.post("", status_code=201, summary="Crear una nueva pista")
def add_track(track: TrackCreate, store: MongoStore = Depends(get_store),
              admin: dict = Depends(require_admin)):
    LOG.info(f"🧩 {admin.get('email', 'admin')} crea track: {track.name}")
    try:
        return create_track(store, track)
    except UpstreamStoreError:
        LOG.exception("❌ Error creando track")
        raise HTTPException(status_code=500, detail=STORE_FAILURE)

# ------------------------------------------------------------
# 🔹 Actualizar track
# ------------------------------------------------------------
@router.put("/{track_id}", summary="Actualizar una pista")
def edit_track(track_id: str, changes: TrackUpdate, store: MongoStore = Depends(get_store),
               admin: dict = Depends(require_admin)):
    try:
        updated = update_track(store, track_id, changes)
    except UpstreamStoreError:
        LOG.exception(f"❌ Error actualizando track {track_id}")
        raise HTTPException(status_code=500, detail=STORE_FAILURE)
    if not updated:
        raise HTTPException(status_code=404, detail="Track no encontrado")
    return updated

# ------------------------------------------------------------
# 🔹 Eliminar track
# ------------------------------------------------------------
@router.delete("/{track_id}", summary="Eliminar una pista")
def remove_track(track_id: str, store: MongoStore = Depends(get_store),
                 admin: dict = Depends(require_admin)):
    try:
        deleted = delete_track(store, track_id)
    except UpstreamStoreError:
        LOG.exception(f"❌ Error eliminando track {track_id}")
        raise HTTPException(status_code=500, detail=STORE_FAILURE)
    if not deleted:
        raise HTTPException(status_code=404, detail="Track no encontrado")
    return {"message": "Track eliminado correctamente", "id": track_id}
