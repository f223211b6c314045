from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from padelplace.players.models import PlayerCouple, ValidationError, validate_id

MIN_GAMES = 0
MAX_GAMES = 19
MIN_BREAKPOINTS = 0
MAX_BREAKPOINTS = 21
MAX_AGE_DAYS = 30
MIN_ROUND_NUMBER = 0
MIN_TITLE_DIGITS = 5
NO_SECONDS_FORMAT = "%Y-%m-%dT%H:%M"


@dataclass(frozen=True)
class Tiebreak:
    points_couple1: int
    points_couple2: int

    def to_document(self) -> dict:
        return {"pointsCouple1": self.points_couple1, "pointsCouple2": self.points_couple2}

    @classmethod
    def from_document(cls, doc: dict) -> "Tiebreak":
        return cls(points_couple1=doc["pointsCouple1"], points_couple2=doc["pointsCouple2"])


@dataclass(frozen=True)
class GameSet:
    games_couple1: int
    games_couple2: int
    tiebreak: Optional[Tiebreak] = None

    def to_document(self) -> dict:
        doc = {"gamesCouple1": self.games_couple1, "gamesCouple2": self.games_couple2}
        if self.tiebreak is not None:
            doc["tiebreak"] = self.tiebreak.to_document()
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "GameSet":
        tiebreak = doc.get("tiebreak")
        return cls(
            games_couple1=doc["gamesCouple1"],
            games_couple2=doc["gamesCouple2"],
            tiebreak=Tiebreak.from_document(tiebreak) if tiebreak else None,
        )


@dataclass(frozen=True)
class Score:
    set1: GameSet
    set2: GameSet
    set3: Optional[GameSet] = None

    def to_document(self) -> dict:
        doc = {"set1": self.set1.to_document(), "set2": self.set2.to_document()}
        if self.set3 is not None:
            doc["set3"] = self.set3.to_document()
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "Score":
        set3 = doc.get("set3")
        return cls(
            set1=GameSet.from_document(doc["set1"]),
            set2=GameSet.from_document(doc["set2"]),
            set3=GameSet.from_document(set3) if set3 else None,
        )


@dataclass
class Match:
    id: str
    timestamp: datetime
    couple1: PlayerCouple = field(default_factory=PlayerCouple)
    couple2: PlayerCouple = field(default_factory=PlayerCouple)
    score: Optional[Score] = None

    def to_document(self) -> dict:
        doc = {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "couple1": self.couple1.to_document(),
            "couple2": self.couple2.to_document(),
        }
        if self.score is not None:
            doc["score"] = self.score.to_document()
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "Match":
        score = doc.get("score")
        return cls(
            id=doc["id"],
            timestamp=datetime.fromisoformat(doc["timestamp"]),
            couple1=PlayerCouple.from_document(doc.get("couple1") or {}),
            couple2=PlayerCouple.from_document(doc.get("couple2") or {}),
            score=Score.from_document(score) if score else None,
        )

    def to_json(self) -> dict:
        doc = self.to_document()
        doc["timestamp"] = self.timestamp.strftime(NO_SECONDS_FORMAT)
        return doc


@dataclass
class Round:
    number: int
    matches: List[Match] = field(default_factory=list)

    def to_document(self) -> dict:
        return {"number": self.number, "matches": [m.to_document() for m in self.matches]}

    @classmethod
    def from_document(cls, doc: dict) -> "Round":
        return cls(
            number=doc["number"],
            matches=[Match.from_document(m) for m in doc.get("matches") or []],
        )

    def to_json(self) -> dict:
        return {"number": self.number, "matches": [m.to_json() for m in self.matches]}


@dataclass
class Tournament:
    """Aggregate root; couples, rounds, matches and scores persist with it as one document."""

    id: str = ""
    title: str = ""
    timestamp: Optional[datetime] = None
    player_couples: List[PlayerCouple] = field(default_factory=list)
    rounds: List[Round] = field(default_factory=list)

    def to_document(self) -> dict:
        doc = {
            "id": self.id,
            "title": self.title,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
        if self.player_couples:
            doc["playerCouples"] = [c.to_document() for c in self.player_couples]
        if self.rounds:
            doc["rounds"] = [r.to_document() for r in self.rounds]
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "Tournament":
        timestamp = doc.get("timestamp")
        return cls(
            id=doc.get("id", ""),
            title=doc.get("title", ""),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else None,
            player_couples=[PlayerCouple.from_document(c) for c in doc.get("playerCouples") or []],
            rounds=[Round.from_document(r) for r in doc.get("rounds") or []],
        )

    def to_json(self) -> dict:
        """JSON rendering with minute precision timestamps; empty lists are omitted."""
        doc = {
            "id": self.id,
            "title": self.title,
            "timestamp": self.timestamp.strftime(NO_SECONDS_FORMAT) if self.timestamp else None,
        }
        if self.player_couples:
            doc["playerCouples"] = [c.to_document() for c in self.player_couples]
        if self.rounds:
            doc["rounds"] = [r.to_json() for r in self.rounds]
        return doc


def _validate_timestamp(timestamp: datetime) -> None:
    floor = datetime.now(tz=timestamp.tzinfo) - timedelta(days=MAX_AGE_DAYS)
    if timestamp < floor:
        raise ValidationError(
            "timestamp", timestamp,
            f"invalid timestamp: {timestamp.isoformat()} is older than {MAX_AGE_DAYS} days",
        )


def new_tournament(
    title: str,
    timestamp: datetime,
    player_couples: Optional[List[PlayerCouple]] = None,
    rounds: Optional[List[Round]] = None,
) -> Tournament:
    if len(title) < MIN_TITLE_DIGITS:
        raise ValidationError("title", title)
    _validate_timestamp(timestamp)
    return Tournament(
        title=title,
        timestamp=timestamp,
        player_couples=list(player_couples or []),
        rounds=list(rounds or []),
    )


def new_round(number: int, matches: Optional[List[Match]] = None) -> Round:
    if number < MIN_ROUND_NUMBER:
        raise ValidationError("round number", number)
    return Round(number=number, matches=list(matches or []))


def new_match(
    id: str,
    timestamp: datetime,
    couple1: PlayerCouple,
    couple2: PlayerCouple,
    score: Optional[Score] = None,
) -> Match:
    validate_id(id)
    _validate_timestamp(timestamp)
    if couple1.id == couple2.id:
        raise ValidationError("couple2", couple2.id, "couple1 and couple2 cannot be the same")
    return Match(id=id, timestamp=timestamp, couple1=couple1, couple2=couple2, score=score)


def new_score(set1: Optional[GameSet], set2: Optional[GameSet], set3: Optional[GameSet] = None) -> Score:
    if set1 is None:
        raise ValidationError("set1", None, "set1 cannot be empty")
    if set2 is None:
        raise ValidationError("set2", None, "set2 cannot be empty")
    return Score(set1=set1, set2=set2, set3=set3)


def new_game_set(games_couple1: int, games_couple2: int, tiebreak: Optional[Tiebreak] = None) -> GameSet:
    if not (MIN_GAMES <= games_couple1 <= MAX_GAMES):
        raise ValidationError("games couple1", games_couple1)
    if not (MIN_GAMES <= games_couple2 <= MAX_GAMES):
        raise ValidationError("games couple2", games_couple2)
    return GameSet(games_couple1=games_couple1, games_couple2=games_couple2, tiebreak=tiebreak)


def new_tiebreak(points_couple1: int, points_couple2: int) -> Tiebreak:
    if not (MIN_BREAKPOINTS <= points_couple1 <= MAX_BREAKPOINTS):
        raise ValidationError("points couple1", points_couple1)
    if not (MIN_BREAKPOINTS <= points_couple2 <= MAX_BREAKPOINTS):
        raise ValidationError("points couple2", points_couple2)
    return Tiebreak(points_couple1=points_couple1, points_couple2=points_couple2)
