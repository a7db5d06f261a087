from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from config import settings
from database.connection import MongoStore, UpstreamStoreError
import logging

# =====================================================
# * Importación de Routers
# =====================================================
from routes.track_routes import router as track_router
from routes.dashboard_routes import router as dashboard_router

# =====================================================
# * Configuración de Logging global
# =====================================================
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s - %(message)s"
)
logger = logging.getLogger("main")


# =====================================================
# * Ciclo de vida del store
# =====================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    store: MongoStore = app.state.store
    owned = not store.connected
    if owned:
        store.connect()
        try:
            store.ensure_indexes()
        except UpstreamStoreError:
            logger.exception("⚠️ No se pudieron verificar los índices de tracks.")
    logger.info(f"🌍 {settings.PROJECT_NAME} backend iniciado en modo '{settings.ENV}'.")
    yield
    if owned:
        store.close()


# =====================================================
# * Inicialización de la aplicación
# =====================================================
def create_app(store: Optional[MongoStore] = None) -> FastAPI:
    app = FastAPI(
        title=f"{settings.PROJECT_NAME} API",
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else MongoStore()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(track_router, prefix="/tracks", tags=["Tracks"])
    app.include_router(dashboard_router, prefix="/dashboard", tags=["Dashboard"])

    @app.get("/", summary="Ruta raíz del backend")
    def root():
        return {
            "message": f"🚀 {settings.PROJECT_NAME} Backend activo",
            "version": settings.VERSION,
            "env": settings.ENV
        }

    @app.get("/health", summary="Estado del servidor")
    def health():
        return {"status": "ok", "message": "Server is running"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
