"""Request/response schemas for stored sessions."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.models import Scope
from src.schemas.settlement import (
    PlayerEntryInput,
    PlayerResult,
    SessionConfig,
    Transfer,
)


class SessionCreate(BaseModel):
    """Payload for saving (or re-saving, when `id` is set) a session."""

    id: str | None = Field(default=None, min_length=1)
    name: str = ""
    date: datetime | None = None
    config: SessionConfig = Field(default_factory=SessionConfig)
    players: list[PlayerEntryInput] = Field(default_factory=list)


class SessionResultRead(BaseModel):
    name: str
    pnl_cny: float


class SessionRead(BaseModel):
    id: str
    scope: Scope
    date: datetime
    name: str
    config: SessionConfig
    results: list[SessionResultRead]


class SessionSaveResponse(BaseModel):
    session: SessionRead
    players: list[PlayerResult]
    transfers: list[Transfer]
