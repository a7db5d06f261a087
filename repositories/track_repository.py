# backend/repositories/track_repository.py
from bson import ObjectId
from bson.errors import InvalidId
from datetime import datetime, timezone
from pymongo import ReturnDocument
from typing import Dict, Optional
import logging

from database.connection import MongoStore, store_operation
from models.track import TrackCreate, TrackUpdate

logger = logging.getLogger("repositories.tracks")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

def _object_id(track_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(track_id)
    except (InvalidId, TypeError):
        logger.warning(f"⚠️ ID de track inválido: {track_id}")
        return None

# ============================================================
# 🔹 Serializador de track
# ============================================================
def serialize_track(doc: dict) -> Optional[Dict]:
    """Convierte un documento Mongo en un dict JSON serializable (``_id`` → ``id``)."""
    if not doc:
        return None
    track = dict(doc)
    track["id"] = str(track.pop("_id"))
    return track

# ============================================================
# 🔹 Obtener track por ID
# ============================================================
def get_track_by_id(store: MongoStore, track_id: str) -> Optional[Dict]:
    """Obtiene un track por su ObjectId (como string). ``None`` si no existe."""
    obj_id = _object_id(track_id)
    if obj_id is None:
        return None
    with store_operation("get_track"):
        doc = store.tracks.find_one({"_id": obj_id})
    return serialize_track(doc)

# ============================================================
# 🔹 Crear track
# ============================================================
def create_track(store: MongoStore, track: TrackCreate) -> Dict:
    doc = track.model_dump()
    doc["created_at"] = doc["updated_at"] = _now()
    with store_operation("create_track"):
        result = store.tracks.insert_one(doc)
    doc["_id"] = result.inserted_id
    logger.info(f"✅ Track creado con ID {result.inserted_id}")
    return serialize_track(doc)

# ============================================================
# 🔹 Actualizar track (parcial)
# ============================================================
def update_track(store: MongoStore, track_id: str, changes: TrackUpdate) -> Optional[Dict]:
    """Aplica sólo los campos enviados. ``None`` si el track no existe."""
    obj_id = _object_id(track_id)
    if obj_id is None:
        return None
    update = changes.changes()
    update["updated_at"] = _now()
    with store_operation("update_track"):
        doc = store.tracks.find_one_and_update(
            {"_id": obj_id},
            {"$set": update},
            return_document=ReturnDocument.AFTER,
        )
    if not doc:
        logger.warning(f"⚠️ Track no encontrado para actualizar: {track_id}")
        return None
    logger.info(f"📝 Track actualizado: {track_id} ({', '.join(sorted(update))})")
    return serialize_track(doc)

# ============================================================
# 🔹 Eliminar track
# ============================================================
def delete_track(store: MongoStore, track_id: str) -> bool:
    obj_id = _object_id(track_id)
    if obj_id is None:
        return False
    with store_operation("delete_track"):
        result = store.tracks.delete_one({"_id": obj_id})
    if result.deleted_count > 0:
        logger.info(f"🗑️ Track eliminado: {track_id}")
        return True
    logger.warning(f"⚠️ No se encontró track para eliminar: {track_id}")
    return False
