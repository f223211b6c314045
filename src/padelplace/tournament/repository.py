from typing import Protocol

import structlog

from padelplace.common.ids import IDGenerator
from padelplace.database import DocumentStore
from padelplace.tournament.models import Tournament

logger = structlog.get_logger(__name__)

TOURNAMENTS_COLLECTION = "tournaments"


class TournamentRepository(Protocol):
    async def upsert(self, tournament: Tournament) -> None: ...

    async def find_by_id(self, id: str) -> Tournament: ...

    async def delete(self, id: str) -> None: ...


class DocumentTournamentRepository:
    """Whole tournament aggregates, one document per tournament."""

    def __init__(self, id_generator: IDGenerator, store: DocumentStore):
        self.id_generator = id_generator
        self.collection = store.collection(TOURNAMENTS_COLLECTION)

    async def upsert(self, tournament: Tournament) -> None:
        if tournament.id:
            await self.collection.replace_one(tournament.id, tournament.to_document())
            return
        tournament.id = self.id_generator.generate_id()
        try:
            await self.collection.insert_one(tournament.id, tournament.to_document())
        except Exception:
            logger.warning("tournament insert failed", tournament_id=tournament.id)
            tournament.id = ""
            raise

    async def find_by_id(self, id: str) -> Tournament:
        doc = await self.collection.find_one(id=id)
        return Tournament.from_document(doc) if doc else Tournament()

    async def delete(self, id: str) -> None:
        await self.collection.delete_one(id)
