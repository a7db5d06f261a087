# backend/models/track.py
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator, model_validator

ARTIST_NAME_MAX_LENGTH = 255


# ============================================================
# 🎤 artist_name: unión etiquetada (un artista | varios)
# ============================================================
@dataclass(frozen=True)
class ScalarArtist:
    name: str

    def to_value(self) -> str:
        return self.name


@dataclass(frozen=True)
class MultiArtist:
    names: Tuple[str, ...]

    def to_value(self) -> List[str]:
        return list(self.names)


ArtistName = Union[ScalarArtist, MultiArtist]


def parse_artist_name(value: Any) -> ArtistName:
    """Etiqueta el valor crudo; cualquier otra forma es inválida."""
    if isinstance(value, str):
        return ScalarArtist(value)
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
        return MultiArtist(tuple(value))
    raise ValueError("El artista debe ser un string o un array de strings no vacío")


def validate_artist_name(artist: ArtistName) -> ArtistName:
    if isinstance(artist, ScalarArtist):
        if not artist.name.strip():
            raise ValueError("El artista no puede estar vacío")
        if len(artist.name) > ARTIST_NAME_MAX_LENGTH:
            raise ValueError(f"El artista no puede exceder {ARTIST_NAME_MAX_LENGTH} caracteres")
    elif isinstance(artist, MultiArtist):
        if not artist.names:
            raise ValueError("La lista de artistas no puede estar vacía")
        if any(not name.strip() for name in artist.names):
            raise ValueError("Ningún artista de la lista puede estar vacío")
    return artist


def _check_artist_name(value: Any) -> Union[str, List[str]]:
    return validate_artist_name(parse_artist_name(value)).to_value()


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


# ============================================================
# 📝 Payloads de escritura
# ============================================================
class TrackCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    artist_name: Union[str, List[str]]
    genre: str = Field(..., min_length=1, max_length=100)
    explicit: bool = False
    duration_ms: float = Field(..., ge=0)
    popularity: int = Field(..., ge=0, le=100)
    danceability: float = Field(..., ge=0, le=1)
    energy: float = Field(..., ge=0, le=1)
    valence: float = Field(..., ge=0, le=1)
    tempo: float = Field(..., ge=0)
    num_artists: int = Field(..., ge=1)

    @field_validator("name", "genre", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("artist_name", mode="before")
    @classmethod
    def check_artist_name(cls, v):
        return _check_artist_name(v)


class TrackUpdate(BaseModel):
    """Actualización parcial: sólo se validan (y escriben) los campos enviados."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    artist_name: Optional[Union[str, List[str]]] = None
    genre: Optional[str] = Field(None, min_length=1, max_length=100)
    explicit: Optional[bool] = None
    duration_ms: Optional[float] = Field(None, ge=0)
    popularity: Optional[int] = Field(None, ge=0, le=100)
    danceability: Optional[float] = Field(None, ge=0, le=1)
    energy: Optional[float] = Field(None, ge=0, le=1)
    valence: Optional[float] = Field(None, ge=0, le=1)
    tempo: Optional[float] = Field(None, ge=0)
    num_artists: Optional[int] = Field(None, ge=1)

    @model_validator(mode="before")
    @classmethod
    def reject_nulls(cls, data):
        if isinstance(data, dict):
            nulls = sorted(k for k, v in data.items() if v is None)
            if nulls:
                raise ValueError(f"Campos sin valor no permitidos: {', '.join(nulls)}")
        return data

    @field_validator("name", "genre", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("artist_name", mode="before")
    @classmethod
    def check_artist_name(cls, v):
        return _check_artist_name(v)

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True)
