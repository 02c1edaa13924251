from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging
import os

from resonance.api import ws_voice
from resonance.core.config import QA_MODE
from resonance.session.registry import session_registry
from resonance.system_metrics import get_metrics_snapshot

logging.basicConfig(
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    level=logging.INFO,
)

app = FastAPI(title="Resonance voice companion")
logger = logging.getLogger("resonance.main")


def _get_allowed_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if not raw:
        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    return [item.strip() for item in raw.split(",") if item.strip()]


_allowed_origins = _get_allowed_origins()

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)


@app.on_event("startup")
async def startup_banner():
    if QA_MODE:
        logger.info("[SYSTEM] QA_MODE ENABLED, vendor services bypassed")
    logger.info("[SYSTEM] CORS allow_origins=%s", _allowed_origins)

    profiles = await ws_voice.dependency_provider.get_aggregator().load_all()
    logger.info("[SYSTEM] profiles loaded=%s", profiles)


@app.on_event("shutdown")
async def shutdown_handler():
    snapshot = get_metrics_snapshot(extra={"sessions_open": session_registry.active_count()})
    logger.info(
        "[SYSTEM] shutdown complete | turns=%s errors=%s avg_total_ms=%s sessions_open=%s",
        snapshot["turns_total"],
        snapshot["turn_errors_total"],
        snapshot["avg_total_ms"],
        snapshot["sessions_open"],
    )
    await ws_voice.dependency_provider.close()


@app.get("/healthz")
async def healthz():
    return {"status": "ok", "service": "resonance"}


app.include_router(ws_voice.router)
