from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from padelplace.players.models import Player


class PlayerSchema(BaseModel):
    """
    Player as exchanged over HTTP (camelCase fields).

    Field contents are not checked here; domain validation happens in the
    use cases so that an invalid value is reported by name.
    """

    id: str = Field("", description="Server assigned identifier; send it to update an existing player.")
    email: str = Field(..., description="Unique business key of the player.")
    social_security_number: Optional[str] = Field(None, alias="socialSecurityNumber")
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    age: Optional[int] = None

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {"email": "agus.tapia@gmail.com", "firstName": "Agustin", "lastName": "Tapia", "age": 25}
            ]
        },
    )

    def to_player(self) -> Player:
        return Player(
            id=self.id,
            email=self.email,
            social_security_number=self.social_security_number,
            first_name=self.first_name,
            last_name=self.last_name,
            age=self.age,
        )

    @classmethod
    def from_player(cls, player: Player) -> "PlayerSchema":
        return cls(
            id=player.id,
            email=player.email,
            social_security_number=player.social_security_number,
            first_name=player.first_name,
            last_name=player.last_name,
            age=player.age,
        )
