"""Utilidades de prueba: track de ejemplo, colección en memoria y evaluadores."""

import copy
from types import SimpleNamespace

from bson import ObjectId


SAMPLE_TRACK = {
    "name": "X",
    "artist_name": "Y",
    "genre": "pop",
    "duration_ms": 200000,
    "popularity": 80,
    "danceability": 0.6,
    "energy": 0.7,
    "valence": 0.5,
    "tempo": 120,
    "num_artists": 1,
}


class FakeTracksCollection:
    """Colección en memoria con las operaciones por ``_id`` que usa el repositorio."""

    def __init__(self):
        self.docs = {}

    def insert_one(self, doc):
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        self.docs[doc["_id"]] = doc
        return SimpleNamespace(inserted_id=doc["_id"])

    def find_one(self, query):
        doc = self.docs.get(query["_id"])
        return copy.deepcopy(doc) if doc else None

    def find_one_and_update(self, query, update, return_document=None):
        doc = self.docs.get(query["_id"])
        if doc is None:
            return None
        doc.update(update["$set"])
        return copy.deepcopy(doc)

    def delete_one(self, query):
        removed = self.docs.pop(query["_id"], None)
        return SimpleNamespace(deleted_count=1 if removed else 0)


def facet_result(docs, total=None):
    """Documento único que devuelve el ``$facet`` de paginación."""
    total = len(docs) if total is None else total
    metadata = [{"total": total}] if total else []
    return iter([{"metadata": metadata, "records": docs}])


def matches(doc, predicate):
    """Evalúa un predicado de rangos ``{campo: {$gte, $lte}}`` sobre un dict."""
    for field, bounds in predicate.items():
        value = doc[field]
        if "$gte" in bounds and value < bounds["$gte"]:
            return False
        if "$lte" in bounds and value > bounds["$lte"]:
            return False
    return True
