from dataclasses import dataclass, field
from typing import Any, Optional

from email_validator import EmailNotValidError
from email_validator import validate_email as parse_email

MIN_RANK = 1
MAX_RANK = 8
MIN_SSN_DIGITS = 8
MIN_AGE = 3
MAX_AGE = 100
MIN_NAME_DIGITS = 3
MIN_ID_DIGITS = 3


class ValidationError(ValueError):
    """A domain invariant was violated; names the offending field and value."""

    def __init__(self, field: str, value: Any, message: Optional[str] = None):
        self.field = field
        self.value = value
        super().__init__(message or f"invalid {field}: {value}")


@dataclass
class Player:
    id: str = ""
    email: str = ""
    social_security_number: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    age: Optional[int] = None

    def to_document(self) -> dict:
        doc = {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }
        if self.social_security_number is not None:
            doc["socialSecurityNumber"] = self.social_security_number
        if self.age is not None:
            doc["age"] = self.age
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "Player":
        return cls(
            id=doc.get("id", ""),
            email=doc.get("email", ""),
            social_security_number=doc.get("socialSecurityNumber"),
            first_name=doc.get("firstName", ""),
            last_name=doc.get("lastName", ""),
            age=doc.get("age"),
        )


@dataclass
class PlayerCouple:
    id: str = ""
    player1: Player = field(default_factory=Player)
    player2: Player = field(default_factory=Player)
    ranking: Optional[int] = None

    def to_document(self) -> dict:
        doc = {
            "id": self.id,
            "player1": self.player1.to_document(),
            "player2": self.player2.to_document(),
        }
        if self.ranking is not None:
            doc["ranking"] = self.ranking
        return doc

    @classmethod
    def from_document(cls, doc: dict) -> "PlayerCouple":
        return cls(
            id=doc.get("id", ""),
            player1=Player.from_document(doc.get("player1") or {}),
            player2=Player.from_document(doc.get("player2") or {}),
            ranking=doc.get("ranking"),
        )


# Validators

def validate_id(id: str) -> None:
    if len(id) < MIN_ID_DIGITS:
        raise ValidationError("id", id)


def validate_email(email: str) -> None:
    try:
        parse_email(
            email,
            allow_quoted_local=True,
            allow_domain_literal=True,
            check_deliverability=False,
            globally_deliverable=False,
        )
    except EmailNotValidError:
        raise ValidationError("email", email) from None


def validate_last_name(last_name: str) -> None:
    if len(last_name) < MIN_NAME_DIGITS:
        raise ValidationError("last name", last_name)


# Factories

def new_player(
    email: str,
    social_security_number: Optional[str],
    first_name: str,
    last_name: str,
    age: Optional[int] = None,
) -> Player:
    """Build a validated Player without id; the repository assigns one on insert."""
    validate_email(email)
    if social_security_number is not None and len(social_security_number) < MIN_SSN_DIGITS:
        raise ValidationError("social security number", social_security_number)
    if len(first_name) < MIN_NAME_DIGITS:
        raise ValidationError("first name", first_name)
    validate_last_name(last_name)
    if age is not None and not (MIN_AGE <= age <= MAX_AGE):
        raise ValidationError("age", age)
    return Player(
        email=email,
        social_security_number=social_security_number,
        first_name=first_name,
        last_name=last_name,
        age=age,
    )


def new_player_couple(player1: Player, player2: Player, ranking: Optional[int] = None) -> PlayerCouple:
    if player1.id == player2.id:
        raise ValidationError("player2", player2.id, "player1 and player2 cannot be the same")
    if ranking is not None and not (MIN_RANK <= ranking <= MAX_RANK):
        raise ValidationError("ranking", ranking)
    return PlayerCouple(player1=player1, player2=player2, ranking=ranking)
