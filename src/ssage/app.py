"""FastAPI application exposing keyword engines per conversation."""

from __future__ import annotations

import logging
import time
from typing import List, Tuple

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response

from .config import Settings
from .observability import MetricsRecorder
from .sessions import ConversationNotFoundError, ConversationRegistry
from .weight import Weight

logger = logging.getLogger(__name__)


_LOGGING_CONFIGURED = False


def _ensure_logging(level: str = "INFO") -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    ssage_logger = logging.getLogger("ssage")
    uvicorn_logger = logging.getLogger("uvicorn.error")

    handlers = list(uvicorn_logger.handlers)
    if handlers:
        ssage_logger.handlers = []
        for handler in handlers:
            ssage_logger.addHandler(handler)
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
        ssage_logger.addHandler(handler)

    level_value = getattr(logging, level.upper(), None)
    ssage_logger.setLevel(level_value if isinstance(level_value, int) else logging.INFO)
    ssage_logger.propagate = False
    _LOGGING_CONFIGURED = True


class ApplicationState:
    """Container for runtime dependencies used by the FastAPI app."""

    def __init__(
        self,
        *,
        settings: Settings,
        registry: ConversationRegistry,
        metrics: MetricsRecorder | None,
    ) -> None:
        self.settings = settings
        self.registry = registry
        self.metrics = metrics


def _serialize_ranked(pairs: List[Tuple[str, Weight]]) -> list[dict[str, object]]:
    return [{"word": word, "weight": weight.value} for word, weight in pairs]


def create_app(
    *,
    settings: Settings | None = None,
    registry: ConversationRegistry | None = None,
    metrics: MetricsRecorder | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or Settings.from_env()
    _ensure_logging(settings.log_level)
    if metrics is None:
        metrics = settings.build_metrics_recorder()
    if registry is None:
        registry = ConversationRegistry(
            settings.configuration,
            max_conversations=settings.max_conversations,
            metrics=metrics,
        )
    logger.info(
        "app.start config_path=%s max_conversations=%s take_words_max=%s",
        settings.configuration_path,
        settings.max_conversations,
        settings.configuration.take_words_max,
    )

    app = FastAPI(title="ssage")
    app.state.services = ApplicationState(settings=settings, registry=registry, metrics=metrics)

    def get_state(request: Request) -> ApplicationState:
        return request.app.state.services

    def get_registry(state: ApplicationState = Depends(get_state)) -> ConversationRegistry:
        return state.registry

    def get_metrics(state: ApplicationState = Depends(get_state)) -> MetricsRecorder | None:
        return state.metrics

    def _adjust(registry: ConversationRegistry, conversation_id: str, word: str, *, raise_weight: bool) -> JSONResponse:
        try:
            weight = registry.adjust_keyword(conversation_id, word, raise_weight=raise_weight)
        except ConversationNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Conversation not found") from exc
        if weight is None:
            raise HTTPException(status_code=404, detail="Keyword not found")
        return JSONResponse({"conversation_id": conversation_id, "word": word, "updated": True, "weight": weight.value})

    @app.post("/conversations/{conversation_id}/messages", response_class=JSONResponse)
    async def feed_message(
        conversation_id: str,
        request: Request,
        registry: ConversationRegistry = Depends(get_registry),
        metrics: MetricsRecorder | None = Depends(get_metrics),
    ) -> JSONResponse:
        try:
            payload = await request.json()
        except ValueError as exc:
            raise HTTPException(status_code=400, detail="Body must be JSON") from exc
        message = payload.get("message") if isinstance(payload, dict) else None
        if not isinstance(message, str):
            raise HTTPException(status_code=400, detail="message is required")
        start_time = time.perf_counter()
        keywords = registry.feed(conversation_id, message)
        if metrics:
            metrics.record_timing("api.feed_latency", time.perf_counter() - start_time)
        logger.info("api.feed conversation=%s message_chars=%s", conversation_id, len(message))
        return JSONResponse({"conversation_id": conversation_id, "keywords": keywords})

    @app.get("/conversations/{conversation_id}/keywords", response_class=JSONResponse)
    async def conversation_keywords(
        conversation_id: str,
        registry: ConversationRegistry = Depends(get_registry),
    ) -> JSONResponse:
        try:
            ranked = registry.ranked_summary(conversation_id)
        except ConversationNotFoundError as exc:
            raise HTTPException(status_code=404, detail="Conversation not found") from exc
        return JSONResponse(
            {
                "conversation_id": conversation_id,
                "keywords": " ".join(word for word, _ in ranked),
                "ranked": _serialize_ranked(ranked),
            }
        )

    @app.post("/conversations/{conversation_id}/keywords/{word}/prioritize", response_class=JSONResponse)
    async def prioritize_keyword(
        conversation_id: str,
        word: str,
        registry: ConversationRegistry = Depends(get_registry),
    ) -> JSONResponse:
        return _adjust(registry, conversation_id, word, raise_weight=True)

    @app.post("/conversations/{conversation_id}/keywords/{word}/trivialize", response_class=JSONResponse)
    async def trivialize_keyword(
        conversation_id: str,
        word: str,
        registry: ConversationRegistry = Depends(get_registry),
    ) -> JSONResponse:
        return _adjust(registry, conversation_id, word, raise_weight=False)

    @app.delete("/conversations/{conversation_id}", response_class=JSONResponse)
    async def reset_conversation(
        conversation_id: str,
        registry: ConversationRegistry = Depends(get_registry),
    ) -> JSONResponse:
        if not registry.reset(conversation_id):
            raise HTTPException(status_code=404, detail="Conversation not found")
        return JSONResponse({"conversation_id": conversation_id, "reset": True})

    @app.get("/health", response_class=JSONResponse)
    async def health(registry: ConversationRegistry = Depends(get_registry)) -> JSONResponse:
        return JSONResponse({"status": "ok", "conversations": len(registry)})

    @app.get("/metrics")
    async def metrics_endpoint(metrics: MetricsRecorder | None = Depends(get_metrics)) -> Response:
        if metrics is None or not metrics.prometheus_enabled:
            raise HTTPException(status_code=404, detail="Metrics export disabled")
        try:
            payload = metrics.render_prometheus()
        except RuntimeError as exc:  # pragma: no cover - defensive guard
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return Response(content=payload, media_type=metrics.prometheus_content_type)

    return app


__all__ = ["ApplicationState", "create_app"]
