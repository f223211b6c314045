# Shared fakes: an in-memory player repository and a deterministic id generator.

from typing import Dict, List, Optional

import pytest

from padelplace.common.ids import IDGenerator
from padelplace.database import DocumentStore, create_store_engine
from padelplace.players.models import Player


class FixedIDGenerator(IDGenerator):
    def __init__(self, id: str = "generated-id"):
        self.id = id

    def generate_id(self) -> str:
        return self.id


class InMemoryPlayerRepository:
    """Implements PlayerRepository over a dict; set ``*_error`` to make a call fail."""

    def __init__(self, players: Optional[List[Player]] = None, id_generator: Optional[IDGenerator] = None):
        self.players: Dict[str, Player] = {p.id: p for p in players or []}
        self.id_generator = id_generator or FixedIDGenerator()
        self.find_error: Optional[Exception] = None
        self.upsert_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None
        self.deleted: List[str] = []

    async def upsert(self, player: Player) -> None:
        if player.id:
            if self.upsert_error:
                raise self.upsert_error
            self.players[player.id] = player
            return
        player.id = self.id_generator.generate_id()
        if self.upsert_error:
            player.id = ""
            raise self.upsert_error
        self.players[player.id] = player

    async def find_by_id(self, id: str) -> Player:
        if self.find_error:
            raise self.find_error
        return self.players.get(id, Player())

    async def find_by_email(self, email: str) -> Player:
        if self.find_error:
            raise self.find_error
        return next((p for p in self.players.values() if p.email == email), Player())

    async def find_by_last_name(self, last_name: str) -> List[Player]:
        if self.find_error:
            raise self.find_error
        return [p for p in self.players.values() if p.last_name == last_name]

    async def delete(self, id: str) -> None:
        if self.delete_error:
            raise self.delete_error
        self.players.pop(id, None)
        self.deleted.append(id)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'padelplace.db'}"


async def open_store(database_url: str, timeout: float = 5.0) -> DocumentStore:
    store = DocumentStore(create_store_engine(database_url), timeout=timeout)
    await store.create_all()
    return store
