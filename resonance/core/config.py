import os
from pathlib import Path
from dotenv import load_dotenv

_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_PROJECT_ENV_PATH = _PROJECT_ROOT / ".env"
load_dotenv(dotenv_path=_PROJECT_ENV_PATH, override=False)


def _env_flag(name: str, default: str = "false") -> bool:
    return str(os.getenv(name, default)).strip().lower() in {"1", "true", "yes", "on"}


OPENAI_API_KEY = str(os.getenv("OPENAI_API_KEY") or "").strip()
ANTHROPIC_API_KEY = str(os.getenv("ANTHROPIC_API_KEY") or "").strip()

REPLY_MODEL = str(os.getenv("REPLY_MODEL") or "claude-sonnet-4-20250514").strip()
REPLY_MAX_TOKENS = max(16, int(os.getenv("REPLY_MAX_TOKENS", "150")))  # short replies on purpose
STT_MODEL = str(os.getenv("STT_MODEL") or "whisper-1").strip()
TTS_MODEL = str(os.getenv("TTS_MODEL") or "tts-1").strip()
TTS_VOICE = str(os.getenv("TTS_VOICE") or "nova").strip()

SERVICE_TIMEOUT_SEC = max(1.0, float(os.getenv("SERVICE_TIMEOUT_SEC", "20")))
GREETING_DELAY_SEC = max(0.0, float(os.getenv("GREETING_DELAY_SEC", "1.0")))

PROFILE_STORE_PATH = Path(
    os.getenv("PROFILE_STORE_PATH") or (_PROJECT_ROOT / "data" / "session_data.json")
)

IDENTITY_TOKEN_SECRET = str(os.getenv("IDENTITY_TOKEN_SECRET") or "").strip()

HOST = str(os.getenv("HOST") or "0.0.0.0").strip()
PORT = int(os.getenv("PORT", "3001"))

QA_MODE = _env_flag("QA_MODE")
