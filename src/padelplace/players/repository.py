from typing import List, Protocol

import structlog

from padelplace.common.ids import IDGenerator
from padelplace.database import DocumentStore
from padelplace.players.models import Player, PlayerCouple

logger = structlog.get_logger(__name__)

PLAYERS_COLLECTION = "players"
PLAYER_COUPLES_COLLECTION = "player_couples"


class PlayerRepository(Protocol):
    async def upsert(self, player: Player) -> None: ...

    async def find_by_id(self, id: str) -> Player: ...

    async def find_by_email(self, email: str) -> Player: ...

    async def find_by_last_name(self, last_name: str) -> List[Player]: ...

    async def delete(self, id: str) -> None: ...


class PlayerCoupleRepository(Protocol):
    async def upsert(self, player_couple: PlayerCouple) -> None: ...

    async def find_by_id(self, id: str) -> PlayerCouple: ...

    async def find_by_prefixes(self, last_name_player1: str, last_name_player2: str) -> List[PlayerCouple]: ...

    async def delete(self, id: str) -> None: ...


class DocumentPlayerRepository:
    """
    Players stored in the ``players`` collection.

    Lookups that match nothing return a zero-value ``Player`` (or an empty
    list) instead of raising; store failures propagate unchanged.
    """

    def __init__(self, id_generator: IDGenerator, store: DocumentStore):
        self.id_generator = id_generator
        self.collection = store.collection(PLAYERS_COLLECTION)

    async def upsert(self, player: Player) -> None:
        if player.id:
            await self.collection.replace_one(player.id, player.to_document())
            return
        player.id = self.id_generator.generate_id()
        try:
            await self.collection.insert_one(player.id, player.to_document())
        except Exception:
            logger.warning("player insert failed", player_id=player.id, email=player.email)
            player.id = ""
            raise

    async def find_by_id(self, id: str) -> Player:
        doc = await self.collection.find_one(id=id)
        return Player.from_document(doc) if doc else Player()

    async def find_by_email(self, email: str) -> Player:
        doc = await self.collection.find_one(email=email)
        return Player.from_document(doc) if doc else Player()

    async def find_by_last_name(self, last_name: str) -> List[Player]:
        return [Player.from_document(doc) for doc in await self.collection.find(lastName=last_name)]

    async def delete(self, id: str) -> None:
        await self.collection.delete_one(id)


class DocumentPlayerCoupleRepository:
    """Couples stored in ``player_couples`` under ``<lastName1>-<lastName2>-<uuid>`` ids."""

    def __init__(self, id_generator: IDGenerator, store: DocumentStore):
        self.id_generator = id_generator
        self.collection = store.collection(PLAYER_COUPLES_COLLECTION)

    async def upsert(self, player_couple: PlayerCouple) -> None:
        if player_couple.id:
            await self.collection.replace_one(player_couple.id, player_couple.to_document())
            return
        player_couple.id = self.id_generator.generate_id_with_prefixes(
            player_couple.player1.last_name, player_couple.player2.last_name,
        )
        try:
            await self.collection.insert_one(player_couple.id, player_couple.to_document())
        except Exception:
            logger.warning("player couple insert failed", couple_id=player_couple.id)
            player_couple.id = ""
            raise

    async def find_by_id(self, id: str) -> PlayerCouple:
        doc = await self.collection.find_one(id=id)
        return PlayerCouple.from_document(doc) if doc else PlayerCouple()

    async def find_by_prefixes(self, last_name_player1: str, last_name_player2: str) -> List[PlayerCouple]:
        prefix = f"{last_name_player1}-{last_name_player2}"
        return [PlayerCouple.from_document(doc) for doc in await self.collection.find(id_prefix=prefix)]

    async def delete(self, id: str) -> None:
        await self.collection.delete_one(id)
