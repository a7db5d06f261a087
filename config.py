# backend/config.py
import os
from dotenv import load_dotenv
from pathlib import Path

# ============================================================
# 🌍 DETECTAR ENTORNO Y CARGAR .env CORRESPONDIENTE
# ============================================================
ENV = os.getenv("ENV", "development")

env_file = ".env.production" if ENV == "production" else ".env.development"
dotenv_path = Path(__file__).resolve().parent / env_file
load_dotenv(dotenv_path)


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# ============================================================
# ⚙️ CONFIGURACIÓN GENERAL
# ============================================================
class Settings:
    PROJECT_NAME: str = os.getenv("PROJECT_NAME", "Track Explorer")
    VERSION: str = os.getenv("VERSION", "1.0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = _int_env("PORT", 8000)

    # 🔹 Mongo (catálogo de tracks)
    MONGO_URI: str = os.getenv("MONGO_URI", "")
    MONGO_USER: str = os.getenv("MONGO_USER")
    MONGO_PASSWORD: str = os.getenv("MONGO_PASSWORD")
    MONGO_HOST: str = os.getenv("MONGO_HOST", "localhost")
    MONGO_PORT: str = os.getenv("MONGO_PORT", "27017")
    MONGO_DB: str = os.getenv("MONGO_DB", "musicdb")
    TRACKS_COLLECTION: str = os.getenv("TRACKS_COLLECTION", "tracks")

    # 🔹 Búsqueda de texto: "atlas" ($search autocomplete) o "regex"
    TEXT_SEARCH_BACKEND: str = os.getenv("TEXT_SEARCH_BACKEND", "atlas")
    SEARCH_INDEX_NAME: str = os.getenv("SEARCH_INDEX_NAME", "default")

    # 🔹 Autenticación (tokens emitidos por el servicio de login)
    SECRET_KEY: str = os.getenv("SECRET_KEY", "supersecret")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ADMIN_ROLE: str = os.getenv("ADMIN_ROLE", "admin")

    # 🔹 Paginación y topes
    DEFAULT_PAGE_LIMIT: int = _int_env("DEFAULT_PAGE_LIMIT", 50)
    MAX_PAGE_LIMIT: int = _int_env("MAX_PAGE_LIMIT", 2000)
    MAX_PAGE_NUMBER: int = _int_env("MAX_PAGE_NUMBER", 1_000_000)
    BULK_LISTING_CAP: int = _int_env("BULK_LISTING_CAP", 2000)

    # 🔹 Dashboard
    DASHBOARD_GENRE_CAP: int = _int_env("DASHBOARD_GENRE_CAP", 10)
    DASHBOARD_ARTIST_CAP: int = _int_env("DASHBOARD_ARTIST_CAP", 10)
    DASHBOARD_TOP_TRACKS: int = _int_env("DASHBOARD_TOP_TRACKS", 10)
    ARTIST_STATS_CAP: int = _int_env("ARTIST_STATS_CAP", 7)
    TOP_POPULAR_LIMIT: int = _int_env("TOP_POPULAR_LIMIT", 5)
    EXPLICIT_BY_GENRE_CAP: int = _int_env("EXPLICIT_BY_GENRE_CAP", 5)
    AVERAGE_DECIMALS: int = _int_env("AVERAGE_DECIMALS", 2)
    PERCENTAGE_DECIMALS: int = _int_env("PERCENTAGE_DECIMALS", 2)
    DASHBOARD_WORKERS: int = _int_env("DASHBOARD_WORKERS", 7)

    # 🔹 Otros
    ALLOWED_ORIGINS: list = os.getenv("ALLOWED_ORIGINS", "*").split(",")
    DEBUG: bool = ENV == "development"
    ENV: str = ENV

settings = Settings()
