from enum import Enum
from typing import List, Optional

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from padelplace.common.ids import IDGenerator
from padelplace.database import DocumentStore
from padelplace.players.models import Player
from padelplace.players.repository import DocumentPlayerRepository, PlayerRepository
from padelplace.players.schemas import PlayerSchema
from padelplace.players.services import (
    FindPlayerStatus, FindPlayerUseCase, RegisterPlayerStatus, RegisterPlayerUseCase,
    UnregisterPlayerStatus, UnregisterPlayerUseCase,
)

router = APIRouter(prefix='/players', tags=['Players'])

STATUS_CODES = {
    RegisterPlayerStatus.PENDING:   status.HTTP_500_INTERNAL_SERVER_ERROR,
    RegisterPlayerStatus.INVALID:   status.HTTP_400_BAD_REQUEST,
    RegisterPlayerStatus.CREATED:   status.HTTP_201_CREATED,
    RegisterPlayerStatus.UPDATED:   status.HTTP_200_OK,
    UnregisterPlayerStatus.PENDING:   status.HTTP_500_INTERNAL_SERVER_ERROR,
    UnregisterPlayerStatus.INVALID:   status.HTTP_400_BAD_REQUEST,
    UnregisterPlayerStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    UnregisterPlayerStatus.DELETED:   status.HTTP_200_OK,
    FindPlayerStatus.PENDING:   status.HTTP_500_INTERNAL_SERVER_ERROR,
    FindPlayerStatus.INVALID:   status.HTTP_400_BAD_REQUEST,
    FindPlayerStatus.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FindPlayerStatus.FOUND:     status.HTTP_200_OK,
}

# Dependencies

def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_player_repository(store: DocumentStore = Depends(get_store)) -> PlayerRepository:
    return DocumentPlayerRepository(IDGenerator(), store)


def get_register_player(repo: PlayerRepository = Depends(get_player_repository)) -> RegisterPlayerUseCase:
    return RegisterPlayerUseCase(repo)


def get_unregister_player(repo: PlayerRepository = Depends(get_player_repository)) -> UnregisterPlayerUseCase:
    return UnregisterPlayerUseCase(repo)


def get_find_player(repo: PlayerRepository = Depends(get_player_repository)) -> FindPlayerUseCase:
    return FindPlayerUseCase(repo)

# Response mapping

def _error_response(status_: Enum, error: Optional[Exception]) -> Optional[JSONResponse]:
    """Error body for failed or unknown outcomes, None when the status is a success."""
    code = STATUS_CODES.get(status_)
    if code is None:
        return JSONResponse({"error": f"invalid status {status_}"}, status_code=500)
    if error is not None:
        # an error never travels with a success code
        return JSONResponse({"error": str(error)}, status_code=code if code >= 400 else 500)
    if code >= 400:
        return JSONResponse({"error": status_.value}, status_code=code)
    return None


def _player_json(player: Player) -> dict:
    return PlayerSchema.from_player(player).model_dump(by_alias=True, exclude_none=True)


def player_response(player: Player, status_: Enum, error: Optional[Exception]) -> JSONResponse:
    failed = _error_response(status_, error)
    if failed is not None:
        return failed
    return JSONResponse(_player_json(player), status_code=STATUS_CODES[status_])


def players_response(players: List[Player], status_: Enum, error: Optional[Exception]) -> JSONResponse:
    failed = _error_response(status_, error)
    if failed is not None:
        return failed
    return JSONResponse([_player_json(p) for p in players], status_code=STATUS_CODES[status_])

# Routes

@router.post("")
async def register_player(
    body: PlayerSchema,
    register: RegisterPlayerUseCase = Depends(get_register_player),
):
    player, status_, error = await register(body.to_player())
    return player_response(player, status_, error)


@router.delete("/{player_id}")
async def unregister_player(
    player_id: str,
    unregister: UnregisterPlayerUseCase = Depends(get_unregister_player),
):
    _, status_, error = await unregister(player_id)
    failed = _error_response(status_, error)
    if failed is not None:
        return failed
    return JSONResponse({"status": status_.value}, status_code=STATUS_CODES[status_])


@router.get("/email/{email}")
async def find_player_by_email(email: str, find: FindPlayerUseCase = Depends(get_find_player)):
    return player_response(*await find.by_email(email))


@router.get("/last-name/{last_name}")
async def find_players_by_last_name(last_name: str, find: FindPlayerUseCase = Depends(get_find_player)):
    return players_response(*await find.by_last_name(last_name))


@router.get("/{player_id}")
async def find_player_by_id(player_id: str, find: FindPlayerUseCase = Depends(get_find_player)):
    return player_response(*await find.by_id(player_id))
