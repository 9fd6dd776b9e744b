"""Request/response schemas for scoreboards and share codes."""

from pydantic import BaseModel, ConfigDict, Field

from src.models import Scope
from src.schemas.stats import PlayerStats


class ScoreboardResponse(BaseModel):
    scope: Scope
    sort_by: str
    players: list[PlayerStats]


class ShareCodeRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    access_code: str = Field(min_length=4, max_length=64)
    display_name: str = ""


class SharedBoardRead(BaseModel):
    owner_id: str
    access_code: str
    display_name: str


class CommentaryResponse(BaseModel):
    scope: Scope
    commentary: dict[str, str]
