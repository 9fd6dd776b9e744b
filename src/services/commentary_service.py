"""Style commentary for scoreboard players, generated by a Gemini model.

Commentary only decorates a scoreboard; nothing here feeds back into the
settlement or scoring code.
"""

from collections.abc import Callable, Sequence
from datetime import UTC, datetime
import json
import math
import re
import time
from typing import Any

import httpx
from loguru import logger
from sqlmodel import Session

from src.core.config import (
    COMMENTARY_BACKOFF_SECONDS,
    COMMENTARY_MAX_ATTEMPTS,
    COMMENTARY_MODELS,
    COMMENTARY_TIMEOUT_SECONDS,
    GEMINI_API_KEY,
    GEMINI_BASE_URL,
)
from src.core.exceptions import ExternalServiceError, RateLimitError
from src.dao.board_dao import get_commentary as get_cached_commentary
from src.dao.board_dao import get_player_commentary, save_commentary
from src.models import PlayerCommentary
from src.schemas.stats import PlayerStats
from src.services.access_service import Board
from src.services.scoreboard_service import build_scoreboard

# Shown to the model in place of an infinite profit factor
PROFIT_FACTOR_DISPLAY_CAP = 99

HTTP_TOO_MANY_REQUESTS = 429
AUTH_FAILURE_STATUSES = frozenset({401, 403})

PROMPT_TEMPLATE = """You are a sharp-tongued but friendly commentator for a home poker league.
Write a short "style review" for every player below, based only on their numbers.

Format for each player (40-70 words):
[emoji] [creative 2-4 word style label]
[2-3 sentences quoting concrete figures and describing how they play]

Guidelines:
- sharpe > 1 and winRate > 60 suggests a disciplined technical player
- high volatility with a large maxDrawdown suggests a roller-coaster player
- a large negative totalPnL with a low winRate suggests a generous donor
- totalSessions <= 2 means the sample is too small, feel free to say so
- profitFactor > 2 means money is won efficiently
- maxLosingStreak >= 3 hints at tilt
- keep it witty, never insulting, and do not repeat labels

Metrics: totalPnL (total profit), avgPnL (per session), winRate (%), sharpe
(risk-adjusted return), volatility (std-dev of results), profitFactor (gross
win / gross loss), maxDrawdown, maxLosingStreak, totalSessions, score (50-99).

Players:
{players}

Reply with a single JSON object mapping each player name to their full review.
No markdown fences and no other text."""

_FENCE_START = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_END = re.compile(r"\s*```$")
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def build_commentary_payload(stats: Sequence[PlayerStats]) -> list[dict[str, Any]]:
    """Rounded per-player figures handed to the model."""
    return [
        {
            "name": s.name,
            "score": round(s.score),
            "totalPnL": round(s.total_pnl),
            "avgPnL": round(s.avg_pnl),
            "winRate": round(s.win_rate),
            "sharpe": round(s.sharpe, 2),
            "volatility": round(s.volatility),
            "profitFactor": (
                round(s.profit_factor, 2)
                if math.isfinite(s.profit_factor)
                else PROFIT_FACTOR_DISPLAY_CAP
            ),
            "maxDrawdown": round(s.max_drawdown),
            "maxLosingStreak": s.max_losing_streak,
            "totalSessions": s.total_sessions,
        }
        for s in stats
    ]


def build_prompt(stats: Sequence[PlayerStats]) -> str:
    players = json.dumps(build_commentary_payload(stats), indent=2, ensure_ascii=False)
    return PROMPT_TEMPLATE.format(players=players)


def parse_commentary(text: str) -> dict[str, str]:
    """Parse the model reply, tolerating markdown fences or surrounding prose."""
    cleaned = _FENCE_END.sub("", _FENCE_START.sub("", text.strip())).strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _JSON_OBJECT.search(cleaned)
        if match is None:
            raise ExternalServiceError(
                message="Commentary model returned malformed output, please retry"
            ) from None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise ExternalServiceError(
                message="Commentary model returned malformed output, please retry"
            ) from e

    if not isinstance(parsed, dict):
        raise ExternalServiceError(message="Commentary model did not return an object")
    return {str(name): str(review) for name, review in parsed.items()}


def _is_rate_limited(response: httpx.Response) -> bool:
    return response.status_code == HTTP_TOO_MANY_REQUESTS or (
        response.is_error and "RESOURCE_EXHAUSTED" in response.text
    )


def _extract_text(body: dict[str, Any]) -> str:
    try:
        parts = body["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError) as e:
        raise ExternalServiceError(message="Commentary model returned no content") from e
    return "".join(part.get("text", "") for part in parts)


def _generate_once(client: httpx.Client, api_key: str, model: str, prompt: str) -> httpx.Response:
    return client.post(
        f"{GEMINI_BASE_URL}/models/{model}:generateContent",
        params={"key": api_key},
        json={"contents": [{"parts": [{"text": prompt}]}]},
    )


def generate_style_evaluations(
    api_key: str,
    stats: Sequence[PlayerStats],
    client: httpx.Client | None = None,
    sleep: Callable[[float], None] = time.sleep,
    models: Sequence[str] | None = None,
    max_attempts: int = COMMENTARY_MAX_ATTEMPTS,
) -> dict[str, str]:
    """Ask the model for a style review of every player.

    Rate-limit failures are retried with exponential backoff and then fall
    through to the next model. Authentication and any other failure is raised
    straight away.

    Returns:
        Mapping of player name to review text; empty without a key or players.

    Raises:
        ExternalServiceError: On a non-retryable upstream failure.
        RateLimitError: When every model stayed rate limited.
    """
    if not api_key or not stats:
        return {}

    models = models or COMMENTARY_MODELS
    prompt = build_prompt(stats)
    owns_client = client is None
    http = client or httpx.Client(timeout=COMMENTARY_TIMEOUT_SECONDS)

    try:
        for model in models:
            for attempt in range(max_attempts):
                if attempt > 0:
                    delay = COMMENTARY_BACKOFF_SECONDS * 2 ** (attempt - 1)
                    logger.info(f"Retrying {model} in {delay:.0f}s (attempt {attempt + 1})")
                    sleep(delay)

                try:
                    response = _generate_once(http, api_key, model, prompt)
                except httpx.HTTPError as e:
                    logger.error(f"Commentary request to {model} failed: {e!s}")
                    raise ExternalServiceError(
                        message=f"Commentary request failed: {e!s}"
                    ) from e

                if _is_rate_limited(response):
                    logger.warning(f"{model} is rate limited (attempt {attempt + 1})")
                    continue
                if response.status_code in AUTH_FAILURE_STATUSES:
                    logger.error(f"{model} rejected the API key ({response.status_code})")
                    raise ExternalServiceError(
                        code="commentary_auth_failed",
                        message="Commentary API key was rejected",
                        details={"status": response.status_code},
                    )
                if response.is_error:
                    logger.error(f"{model} returned {response.status_code}")
                    raise ExternalServiceError(
                        message=f"Commentary model returned HTTP {response.status_code}",
                        details={"status": response.status_code},
                    )

                commentary = parse_commentary(_extract_text(response.json()))
                logger.success(f"Generated commentary for {len(commentary)} players via {model}")
                return commentary
    finally:
        if owns_client:
            http.close()

    raise RateLimitError(details={"models": list(models)})


def refresh_commentary(
    session: Session,
    board: Board,
    api_key: str | None = None,
    client: httpx.Client | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, str]:
    """Generate commentary for a board's current scoreboard and cache it.

    Raises:
        ExternalServiceError: When no API key is configured, or upstream fails.
    """
    api_key = api_key or GEMINI_API_KEY
    if not api_key:
        raise ExternalServiceError(
            code="commentary_not_configured",
            message="Commentary generation is disabled: GEMINI_API_KEY is not set",
        )

    stats = build_scoreboard(session, board)
    commentary = generate_style_evaluations(api_key, stats, client=client, sleep=sleep)

    now = datetime.now(UTC)
    known = {s.name for s in stats}
    for name, text in commentary.items():
        if name not in known:
            logger.debug(f"Ignoring commentary for unknown player {name!r}")
            continue
        cached = get_player_commentary(session, board.scope, board.owner_id, name)
        if cached is None:
            cached = PlayerCommentary(
                scope=board.scope, owner_id=board.owner_id, player_name=name, text=text
            )
        cached.text = text
        cached.updated_at = now
        save_commentary(session, cached)
    session.commit()
    return get_commentary(session, board)


def get_commentary(session: Session, board: Board) -> dict[str, str]:
    """Cached commentary for a board, keyed by player name."""
    cached = get_cached_commentary(session, board.scope, board.owner_id)
    return {c.player_name: c.text for c in cached}
