import asyncio
from datetime import datetime, timezone

from conftest import open_store
from padelplace.common.ids import IDGenerator
from padelplace.players.models import Player, PlayerCouple
from padelplace.tournament.models import (
    Tournament, new_game_set, new_match, new_round, new_score, new_tiebreak, new_tournament,
)
from padelplace.tournament.repository import DocumentTournamentRepository


def _grand_slam() -> Tournament:
    now = datetime.now(timezone.utc)
    c1 = PlayerCouple(
        id="Tapia-Coello-1",
        player1=Player(id="p-1", email="agus.tapia@gmail.com", first_name="Agustin", last_name="Tapia"),
        player2=Player(id="p-2", email="arturo.coello@gmail.com", first_name="Arturo", last_name="Coello"),
        ranking=1,
    )
    c2 = PlayerCouple(
        id="Galan-Chingotto-1",
        player1=Player(id="p-3", email="ale.galan@gmail.com", first_name="Alejandro", last_name="Galan"),
        player2=Player(id="p-4", email="fede.chingotto@gmail.com", first_name="Federico", last_name="Chingotto"),
        ranking=2,
    )
    score = new_score(new_game_set(6, 4), new_game_set(6, 7, new_tiebreak(5, 7)), new_game_set(6, 3))
    final = new_round(1, [new_match("final-1", now, c1, c2, score)])
    return new_tournament("Premier Padel Madrid", now, [c1, c2], [final])


def test_tournament_aggregate_round_trip(database_url):
    async def scenario():
        store = await open_store(database_url)
        try:
            repo = DocumentTournamentRepository(IDGenerator(), store)
            tournament = _grand_slam()
            await repo.upsert(tournament)
            assert tournament.id
            assert await repo.find_by_id(tournament.id) == tournament

            tournament.title = "Premier Padel Madrid P1"
            await repo.upsert(tournament)
            assert (await repo.find_by_id(tournament.id)).title == "Premier Padel Madrid P1"

            await repo.delete(tournament.id)
            assert await repo.find_by_id(tournament.id) == Tournament()
        finally:
            await store.close()

    asyncio.run(scenario())
