import asyncio
import logging
import os
import sys

try:
    import jwt  # noqa: F401
    import websockets  # noqa: F401
except Exception as exc:
    print("missing dependency:", exc, file=sys.stderr)
    print("install: pip install -r scripts/requirements.txt", file=sys.stderr)
    sys.exit(2)

from lk_signal import connection_events, describe
from lk_token import resolve_token

LIVEKIT_URL = os.getenv("LIVEKIT_URL", "ws://localhost:7880")
LIVEKIT_TOKEN = os.getenv("LIVEKIT_TOKEN", "")
LIVEKIT_API_KEY = os.getenv("LIVEKIT_API_KEY", "devkey")
LIVEKIT_API_SECRET = os.getenv("LIVEKIT_API_SECRET", "secret")
LIVEKIT_ROOM = os.getenv("LIVEKIT_ROOM", "my-room")
LIVEKIT_IDENTITY = os.getenv("LIVEKIT_IDENTITY", "identity")
LIVEKIT_TOKEN_TTL = int(os.getenv("LIVEKIT_TOKEN_TTL", "3600"))
LIVEKIT_AUTH = os.getenv("LIVEKIT_AUTH", "header")
TIMEOUT_SECONDS = float(os.getenv("WS_TIMEOUT", "10"))
MAX_MESSAGES = int(os.getenv("WS_MAX_MESSAGES", "0"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

log = logging.getLogger(__name__)


def setup_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(level=level.upper(), format="[%(levelname)s] %(message)s", stream=sys.stdout)


async def run_signal_smoke(
    base_url: str,
    token: str,
    auth: str = "header",
    open_timeout: float = TIMEOUT_SECONDS,
    max_messages: int = MAX_MESSAGES,
) -> None:
    async for event in connection_events(
        base_url, token, auth=auth, open_timeout=open_timeout, max_messages=max_messages
    ):
        log.info(describe(event))


async def main() -> None:
    setup_logging()
    token = resolve_token(
        LIVEKIT_TOKEN,
        LIVEKIT_API_KEY,
        LIVEKIT_API_SECRET,
        LIVEKIT_ROOM,
        LIVEKIT_IDENTITY,
        LIVEKIT_TOKEN_TTL,
    )
    await run_signal_smoke(LIVEKIT_URL, token, auth=LIVEKIT_AUTH)


if __name__ == "__main__":
    asyncio.run(main())
