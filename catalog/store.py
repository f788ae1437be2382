"""
Tiny JSON document store.

All collections live in one JSON file, rewritten after every change (the
catalog is small and written rarely, from the admin panel). With no path the
store is memory-only, which is what the tests use.
"""
import copy
import json
import os
import secrets
import threading
from typing import Any, Callable, Dict, List, Optional

Document = Dict[str, Any]


class DocumentStore:
    def __init__(self, path: Optional[str] = None) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._collections: Dict[str, List[Document]] = {}
        if path:
            self._load()

    # ---------- persistence ----------

    def _load(self) -> None:
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            print(f"[Store] Error loading {self.path}: {e}")
            return
        if isinstance(data, dict):
            self._collections = {
                name: [d for d in docs if isinstance(d, dict)]
                for name, docs in data.items()
                if isinstance(docs, list)
            }

    def _save_unlocked(self) -> None:
        if not self.path:
            return
        tmp = f"{self.path}.tmp"
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(self._collections, f, indent=2)
            os.replace(tmp, self.path)
        except OSError as e:
            print(f"[Store] Error saving {self.path}: {e}")

    # ---------- documents ----------

    @staticmethod
    def new_id() -> str:
        # same width as a Mongo ObjectId, so ids from older dumps look alike
        return secrets.token_hex(12)

    def insert(self, collection: str, doc: Document) -> Document:
        stored = copy.deepcopy(doc)
        stored.setdefault("id", self.new_id())
        with self._lock:
            self._collections.setdefault(collection, []).append(stored)
            self._save_unlocked()
        return copy.deepcopy(stored)

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        with self._lock:
            for doc in self._collections.get(collection, []):
                if doc.get("id") == doc_id:
                    return copy.deepcopy(doc)
        return None

    def update(self, collection: str, doc_id: str, fields: Document) -> Optional[Document]:
        """Shallow-merge ``fields`` into the document; None when it doesn't exist."""
        with self._lock:
            for doc in self._collections.get(collection, []):
                if doc.get("id") == doc_id:
                    doc.update(copy.deepcopy(fields))
                    doc["id"] = doc_id
                    self._save_unlocked()
                    return copy.deepcopy(doc)
        return None

    def find(
        self,
        collection: str,
        predicate: Optional[Callable[[Document], bool]] = None,
    ) -> List[Document]:
        with self._lock:
            docs = self._collections.get(collection, [])
            matched = [d for d in docs if predicate is None or predicate(d)]
            return copy.deepcopy(matched)

