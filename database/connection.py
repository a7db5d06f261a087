# backend/database/connection.py
import logging
from contextlib import contextmanager
from typing import Optional

from fastapi import Request
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from config import settings

logger = logging.getLogger("database.connection")

# Orden global de popularidad; _id desempata para que la paginación sea estable
POPULARITY_ORDER = [("popularity", DESCENDING), ("_id", ASCENDING)]
POPULARITY_INDEX = "popularity_-1__id_1"
EXPLICIT_INDEX = "explicit_1"


# ============================================================
# ⚠️ Error del almacén de datos
# ============================================================
class UpstreamStoreError(Exception):
    """MongoDB no disponible o la consulta falló al ejecutarse."""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Fallo en operación '{operation}': {cause}")


@contextmanager
def store_operation(operation: str):
    """Traduce cualquier error de pymongo a UpstreamStoreError."""
    try:
        yield
    except PyMongoError as e:
        raise UpstreamStoreError(operation, e) from e


# ============================================================
# 🔧 CONSTRUCTOR DE URI
# ============================================================
def build_mongo_uri() -> str:
    if settings.MONGO_URI:
        return settings.MONGO_URI
    host, port = settings.MONGO_HOST, settings.MONGO_PORT
    if settings.MONGO_USER and settings.MONGO_PASSWORD:
        return f"mongodb://{settings.MONGO_USER}:{settings.MONGO_PASSWORD}@{host}:{port}"
    return f"mongodb://{host}:{port}"


# ============================================================
# 🎵 HANDLE DEL CATÁLOGO
# ============================================================
class MongoStore:
    """
    Handle explícito hacia la base de música.

    Ciclo de vida: se construye sin abrir conexiones, ``connect()`` crea el
    MongoClient y ``close()`` lo libera. Lo posee el lifespan de la app y se
    inyecta en rutas, repositorios y agregaciones.
    """

    def __init__(self, uri: Optional[str] = None, db_name: Optional[str] = None,
                 collection_name: Optional[str] = None):
        self.uri = uri or build_mongo_uri()
        self.db_name = db_name or settings.MONGO_DB
        self.collection_name = collection_name or settings.TRACKS_COLLECTION
        self._client: Optional[MongoClient] = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    def connect(self) -> "MongoStore":
        if self._client is None:
            self._client = MongoClient(self.uri)
            logger.info(f"✅ Conectado a base de música: {self.db_name}")
        return self

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("🔌 Conexión a MongoDB cerrada.")

    @property
    def tracks(self):
        if self._client is None:
            raise UpstreamStoreError("tracks", RuntimeError("store no conectado"))
        return self._client[self.db_name][self.collection_name]

    def ping(self) -> bool:
        with store_operation("ping"):
            self.tracks.database.command("ping")
        return True

    def ensure_indexes(self) -> None:
        """Índices de popularidad (orden global) y explícito (dashboard)."""
        with store_operation("ensure_indexes"):
            self.tracks.create_index(POPULARITY_ORDER, name=POPULARITY_INDEX)
            self.tracks.create_index([("explicit", ASCENDING)], name=EXPLICIT_INDEX)
        logger.info("📇 Índices de tracks verificados.")


# ============================================================
# 🧩 DEPENDENCIA FASTAPI
# ============================================================
def get_store(request: Request) -> MongoStore:
    """Devuelve el store que el lifespan dejó en ``app.state``."""
    return request.app.state.store
