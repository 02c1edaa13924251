from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import anyio
import asyncio
import json
import logging
import os
import uuid

from resonance.auth import issue_identity_token, resolve_identity
from resonance.core import config
from resonance.core.logger import log_event
from resonance.errors import MalformedMessage
from resonance.pipeline.events import VoiceEventEmitter
from resonance.pipeline.turn import TurnOrchestrator
from resonance.profile.aggregator import ProfileAggregator, profile_aggregator
from resonance.services.base import VoiceServices
from resonance.services.factory import build_voice_services
from resonance.session.engine import SessionEngine
from resonance.session.registry import ConnectionContext, session_registry
from resonance.session_controller import SessionController
from resonance.system_metrics import decrement_metric, increment_metric
from starlette.websockets import WebSocketState

logging.basicConfig(
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger("ws_voice")

# base64 webm for a long push-to-talk utterance comfortably fits
MAX_WS_TEXT_BYTES = max(1024, int(os.getenv("WS_MAX_TEXT_BYTES", str(16 * 1024 * 1024))))

router = APIRouter()
websocket_send_locks: dict[WebSocket, asyncio.Lock] = {}


class WsDependencyProvider:
    def __init__(self):
        self._services: VoiceServices | None = None

    def get_services(self) -> VoiceServices:
        """Vendor clients are built once and shared by every connection."""
        if self._services is None:
            self._services = build_voice_services()
        return self._services

    async def close(self) -> None:
        if self._services is not None:
            await self._services.aclose()
            self._services = None

    def get_aggregator(self) -> ProfileAggregator:
        return profile_aggregator

    def create_session_engine(self) -> SessionEngine:
        return SessionEngine()

    def greeting_delay_sec(self) -> float:
        return config.GREETING_DELAY_SEC


dependency_provider = WsDependencyProvider()


async def _send_text_with_lock(websocket: WebSocket, encoded_payload: str) -> None:
    lock = websocket_send_locks.get(websocket)
    if lock is None:
        await websocket.send_text(encoded_payload)
        return
    async with lock:
        await websocket.send_text(encoded_payload)


def _extract_token(websocket: WebSocket) -> str:
    auth_header = str(websocket.headers.get("authorization") or "").strip()
    token_from_header = auth_header.replace("Bearer ", "", 1).strip() if auth_header.lower().startswith("bearer ") else ""
    return (
        token_from_header
        or str(websocket.query_params.get("token") or "").strip()
    )


@router.websocket("/ws/voice")
async def voice_ws(websocket: WebSocket):
    # ================= LIFECYCLE OWNER =================
    connection_id = str(uuid.uuid4())
    controller = SessionController(connection_id=connection_id)
    identity, identity_reused = resolve_identity(_extract_token(websocket))
    context = ConnectionContext(
        connection_id=connection_id,
        identity=identity,
        engine=dependency_provider.create_session_engine(),
    )

    def _log_event(event: str, **fields):
        log_event("ws_voice", event, context, **fields)

    try:
        services = dependency_provider.get_services()
    except Exception as exc:
        logger.exception("Voice services unavailable | connection_id=%s err=%s", connection_id, exc)
        await websocket.close(code=1011, reason="Voice services unavailable")
        return

    await websocket.accept()
    websocket_send_locks[websocket] = asyncio.Lock()
    _log_event("connect", identity_reused=identity_reused)

    async def _safe_send(payload: dict):
        # After disconnect every pending send is dropped silently.
        if controller.stop_event.is_set() or websocket.client_state != WebSocketState.CONNECTED:
            return
        try:
            encoded = json.dumps(payload)
        except (TypeError, ValueError) as exc:
            logger.warning("ws payload encode failed | connection_id=%s err=%s", connection_id, exc)
            return
        try:
            await _send_text_with_lock(websocket, encoded)
            _log_event(
                "message_sent",
                message_type=str((payload or {}).get("type") or "unknown"),
                bytes=len(encoded.encode("utf-8")),
            )
        except Exception as exc:
            logger.warning("ws send failed | connection_id=%s err=%s", connection_id, exc)

    # ================= STATE =================
    aggregator = dependency_provider.get_aggregator()
    aggregator.get_or_create(identity)
    emitter = VoiceEventEmitter(send_fn=_safe_send)
    orchestrator = TurnOrchestrator(
        context=context,
        services=services,
        aggregator=aggregator,
        emitter=emitter,
        is_closing=controller.stop_event.is_set,
    )

    await emitter.session(connection_id, issue_identity_token(identity))

    async with session_registry.scoped(context):
        increment_metric("ws_connections_active", 1)
        increment_metric("ws_connections_total", 1)
        controller.start()
        controller.schedule(dependency_provider.greeting_delay_sec(), orchestrator.greet)

        # ================= RECEIVE LOOP =================
        disconnect_reason = "client_disconnect"
        try:
            while True:
                msg = await websocket.receive()

                if msg["type"] == "websocket.disconnect":
                    break

                text_payload = msg.get("text")
                if text_payload is None:
                    increment_metric("malformed_messages_total")
                    await controller.submit(
                        lambda: emitter.error(MalformedMessage("Binary frames are not supported; send JSON text."))
                    )
                    continue

                payload_bytes = len(text_payload.encode("utf-8"))
                if payload_bytes > MAX_WS_TEXT_BYTES:
                    logger.warning("WS message too large | connection_id=%s bytes=%s", connection_id, payload_bytes)
                    increment_metric("malformed_messages_total")
                    await controller.submit(lambda: emitter.error(MalformedMessage("Message is too large.")))
                    continue

                session_registry.touch(connection_id)
                await controller.submit(lambda raw=text_payload: orchestrator.handle_text(raw))
        except WebSocketDisconnect:
            pass
        except Exception as exc:
            disconnect_reason = "receive_error"
            logger.exception("WS receive failed | connection_id=%s err=%s", connection_id, exc)
        finally:
            # Queued profile writes must land even if the server is cancelling this task.
            with anyio.CancelScope(shield=True):
                await controller.stop()
            websocket_send_locks.pop(websocket, None)
            decrement_metric("ws_connections_active", 1)
            increment_metric("ws_disconnects_total", 1)
            _log_event(
                "disconnect",
                reason=disconnect_reason,
                jobs=controller.jobs_completed,
            )
