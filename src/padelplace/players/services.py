from enum import Enum
from typing import Generic, List, NamedTuple, Optional, TypeVar

import structlog

from padelplace.players.models import (
    Player, ValidationError, new_player, validate_email, validate_id, validate_last_name,
)
from padelplace.players.repository import PlayerRepository

logger = structlog.get_logger(__name__)


class RegisterPlayerStatus(Enum):
    PENDING = "pending"
    INVALID = "invalid"
    UPDATED = "updated"
    CREATED = "created"


class UnregisterPlayerStatus(Enum):
    PENDING = "pending"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    DELETED = "deleted"


class FindPlayerStatus(Enum):
    PENDING = "pending"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    FOUND = "found"


V = TypeVar("V")
S = TypeVar("S", bound=Enum)


class UseCaseResult(NamedTuple, Generic[V, S]):
    """Outcome of a use case: the payload, how it ended, and the error if any."""

    value: V
    status: S
    error: Optional[Exception] = None


RegisterPlayerResult = UseCaseResult[Player, RegisterPlayerStatus]
UnregisterPlayerResult = UseCaseResult[None, UnregisterPlayerStatus]
FindPlayerResult = UseCaseResult[Player, FindPlayerStatus]
FindPlayersResult = UseCaseResult[List[Player], FindPlayerStatus]


class RegisterPlayerUseCase:
    """
    Create a player, or update it when it already exists.

    The existing record is looked up by the supplied id when there is one,
    otherwise by email. An update keeps the stored id; a creation lets the
    repository generate a fresh one.
    """

    def __init__(self, player_repository: PlayerRepository):
        self.player_repository = player_repository

    async def __call__(self, input_player: Player) -> RegisterPlayerResult:
        try:
            player = new_player(
                input_player.email,
                input_player.social_security_number,
                input_player.first_name,
                input_player.last_name,
                input_player.age,
            )
        except ValidationError as exc:
            logger.debug("player rejected", error=str(exc))
            return UseCaseResult(Player(), RegisterPlayerStatus.INVALID, exc)

        try:
            found = await self._find_by_id_or_email(input_player.id, input_player.email)
        except Exception as exc:
            return UseCaseResult(Player(), RegisterPlayerStatus.PENDING, exc)

        if found.id:
            player.id = found.id
            status = RegisterPlayerStatus.UPDATED
        else:
            status = RegisterPlayerStatus.CREATED

        try:
            await self.player_repository.upsert(player)
        except Exception as exc:
            logger.debug("player upsert failed", email=player.email, error=str(exc))
            return UseCaseResult(Player(), RegisterPlayerStatus.PENDING, exc)

        logger.info("player registered", player_id=player.id, status=status.value)
        return UseCaseResult(player, status)

    async def _find_by_id_or_email(self, id: str, email: str) -> Player:
        if id:
            validate_id(id)
            return await self.player_repository.find_by_id(id)
        # email already validated by new_player
        return await self.player_repository.find_by_email(email)


class UnregisterPlayerUseCase:
    def __init__(self, player_repository: PlayerRepository):
        self.player_repository = player_repository

    async def __call__(self, player_id: str) -> UnregisterPlayerResult:
        try:
            validate_id(player_id)
        except ValidationError as exc:
            return UseCaseResult(None, UnregisterPlayerStatus.INVALID, exc)

        try:
            found = await self.player_repository.find_by_id(player_id)
        except Exception as exc:
            return UseCaseResult(None, UnregisterPlayerStatus.PENDING, exc)
        if not found.id:
            return UseCaseResult(None, UnregisterPlayerStatus.NOT_FOUND)

        try:
            await self.player_repository.delete(player_id)
        except Exception as exc:
            logger.warning("player delete failed", player_id=player_id, error=str(exc))
            return UseCaseResult(None, UnregisterPlayerStatus.PENDING, exc)

        logger.info("player unregistered", player_id=player_id)
        return UseCaseResult(None, UnregisterPlayerStatus.DELETED)


class FindPlayerUseCase:
    """Lookups by id, email or last name; nothing found is a status, not an error."""

    def __init__(self, player_repository: PlayerRepository):
        self.player_repository = player_repository

    async def by_id(self, player_id: str) -> FindPlayerResult:
        try:
            validate_id(player_id)
        except ValidationError as exc:
            return UseCaseResult(Player(), FindPlayerStatus.INVALID, exc)
        try:
            player = await self.player_repository.find_by_id(player_id)
        except Exception as exc:
            return UseCaseResult(Player(), FindPlayerStatus.PENDING, exc)
        return UseCaseResult(player, FindPlayerStatus.FOUND if player.id else FindPlayerStatus.NOT_FOUND)

    async def by_email(self, email: str) -> FindPlayerResult:
        try:
            validate_email(email)
        except ValidationError as exc:
            return UseCaseResult(Player(), FindPlayerStatus.INVALID, exc)
        try:
            player = await self.player_repository.find_by_email(email)
        except Exception as exc:
            return UseCaseResult(Player(), FindPlayerStatus.PENDING, exc)
        return UseCaseResult(player, FindPlayerStatus.FOUND if player.id else FindPlayerStatus.NOT_FOUND)

    async def by_last_name(self, last_name: str) -> FindPlayersResult:
        try:
            validate_last_name(last_name)
        except ValidationError as exc:
            return UseCaseResult([], FindPlayerStatus.INVALID, exc)
        try:
            players: List[Player] = await self.player_repository.find_by_last_name(last_name)
        except Exception as exc:
            return UseCaseResult([], FindPlayerStatus.PENDING, exc)
        return UseCaseResult(players, FindPlayerStatus.FOUND if players else FindPlayerStatus.NOT_FOUND)
