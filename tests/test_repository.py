import asyncio

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import FixedIDGenerator, open_store
from padelplace.common.ids import IDGenerator
from padelplace.players.models import Player, PlayerCouple, new_player, new_player_couple
from padelplace.players.repository import DocumentPlayerCoupleRepository, DocumentPlayerRepository


def _tapia():
    return new_player("agus.tapia@gmail.com", "12345678", "Agustin", "Tapia", 25)


def _galan():
    return new_player("ale.galan@gmail.com", None, "Alejandro", "Galan")


def test_upsert_then_find_by_id(database_url):
    async def scenario():
        store = await open_store(database_url)
        try:
            repo = DocumentPlayerRepository(IDGenerator(), store)
            player = _tapia()
            await repo.upsert(player)
            assert player.id
            first = await repo.find_by_id(player.id)
            second = await repo.find_by_id(player.id)
            assert first == player
            assert first == second
        finally:
            await store.close()

    asyncio.run(scenario())


def test_upsert_existing_replaces(database_url):
    async def scenario():
        store = await open_store(database_url)
        try:
            repo = DocumentPlayerRepository(IDGenerator(), store)
            player = _tapia()
            await repo.upsert(player)
            updated = new_player("agus.tapia@gmail.com", None, "Agustin", "Tapia", 26)
            updated.id = player.id
            await repo.upsert(updated)
            assert await repo.find_by_id(player.id) == updated
            assert await repo.find_by_last_name("Tapia") == [updated]
        finally:
            await store.close()

    asyncio.run(scenario())


def test_find_missing_returns_zero_values(database_url):
    async def scenario():
        store = await open_store(database_url)
        try:
            repo = DocumentPlayerRepository(IDGenerator(), store)
            assert await repo.find_by_id("missing-id") == Player()
            assert await repo.find_by_email("nobody@example.com") == Player()
            assert await repo.find_by_last_name("Nobody") == []
        finally:
            await store.close()

    asyncio.run(scenario())


def test_find_by_email_and_last_name(database_url):
    async def scenario():
        store = await open_store(database_url)
        try:
            repo = DocumentPlayerRepository(IDGenerator(), store)
            john = new_player("john@example.com", None, "John", "Doe")
            jane = new_player("jane@example.com", None, "Jane", "Doe")
            for player in (john, _galan(), jane):
                await repo.upsert(player)
            assert await repo.find_by_email("jane@example.com") == jane
            assert await repo.find_by_last_name("Doe") == [john, jane]
            assert await repo.find_by_last_name("doe") == []
        finally:
            await store.close()

    asyncio.run(scenario())


def test_failed_insert_clears_generated_id(database_url):
    async def scenario():
        store = await open_store(database_url)
        try:
            repo = DocumentPlayerRepository(FixedIDGenerator("duplicated-id"), store)
            await repo.upsert(_tapia())
            player = _galan()
            with pytest.raises(IntegrityError):
                await repo.upsert(player)
            assert player.id == ""
        finally:
            await store.close()

    asyncio.run(scenario())


def test_delete(database_url):
    async def scenario():
        store = await open_store(database_url)
        try:
            repo = DocumentPlayerRepository(IDGenerator(), store)
            player = _tapia()
            await repo.upsert(player)
            await repo.delete(player.id)
            assert await repo.find_by_id(player.id) == Player()
            # deleting twice is not an error
            await repo.delete(player.id)
        finally:
            await store.close()

    asyncio.run(scenario())


def test_couple_ids_are_prefixed_by_surnames(database_url):
    async def scenario():
        store = await open_store(database_url)
        try:
            players = DocumentPlayerRepository(IDGenerator(), store)
            couples = DocumentPlayerCoupleRepository(IDGenerator(), store)
            tapia, galan = _tapia(), _galan()
            await players.upsert(tapia)
            await players.upsert(galan)

            couple = new_player_couple(tapia, galan, 1)
            await couples.upsert(couple)
            assert couple.id.startswith("Tapia-Galan-")
            assert await couples.find_by_prefixes("Tapia", "Galan") == [couple]
            assert await couples.find_by_id(couple.id) == couple
            assert await couples.find_by_prefixes("Galan", "Tapia") == []
            assert await couples.find_by_prefixes("Tap%", "Galan") == []
        finally:
            await store.close()

    asyncio.run(scenario())


def test_couple_update_and_delete(database_url):
    async def scenario():
        store = await open_store(database_url)
        try:
            couples = DocumentPlayerCoupleRepository(IDGenerator(), store)
            tapia, galan = _tapia(), _galan()
            tapia.id, galan.id = "p-1", "p-2"
            couple = new_player_couple(tapia, galan)
            await couples.upsert(couple)

            ranked = PlayerCouple(id=couple.id, player1=tapia, player2=galan, ranking=2)
            await couples.upsert(ranked)
            assert (await couples.find_by_id(couple.id)).ranking == 2

            await couples.delete(couple.id)
            assert await couples.find_by_id(couple.id) == PlayerCouple()
            assert await couples.find_by_prefixes("Tapia", "Galan") == []
        finally:
            await store.close()

    asyncio.run(scenario())


def test_failed_couple_insert_clears_generated_id(database_url):
    class SameSuffix(IDGenerator):
        def generate_id(self) -> str:
            return "same"

    async def scenario():
        store = await open_store(database_url)
        try:
            couples = DocumentPlayerCoupleRepository(SameSuffix(), store)
            tapia, galan = _tapia(), _galan()
            tapia.id, galan.id = "p-1", "p-2"
            await couples.upsert(new_player_couple(tapia, galan))
            couple = new_player_couple(tapia, galan)
            with pytest.raises(IntegrityError):
                await couples.upsert(couple)
            assert couple.id == ""
        finally:
            await store.close()

    asyncio.run(scenario())
