"""Supabase implementation of the record store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from macro_manager.domain.errors import PersistenceError
from macro_manager.services.records import RecordStore

TABLE = "record_collections"


@dataclass
class SupabaseRecordStore(RecordStore):
    """Supabase-backed store keeping one row per collection."""

    client: Client

    def load(self, collection: str) -> str | None:
        """Return the stored payload for a collection."""
        try:
            response = (
                self.client.table(TABLE)
                .select("payload")
                .eq("name", collection)
                .limit(1)
                .execute()
            )
        except Exception as exc:
            raise PersistenceError(f"Failed to load {collection}") from exc
        if not response.data:
            return None
        return response.data[0].get("payload")

    def save(self, collection: str, blob: str) -> None:
        """Upsert the payload for a collection."""
        try:
            self.client.table(TABLE).upsert(
                {
                    "name": collection,
                    "payload": blob,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="name",
            ).execute()
        except Exception as exc:
            raise PersistenceError(f"Failed to save {collection}") from exc
