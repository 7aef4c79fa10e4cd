import asyncio
import contextlib
import json
import logging
import os
import sys
import urllib.request
from typing import Tuple

try:
    import websockets
    from websockets.asyncio.client import ClientConnection
    from websockets.exceptions import ConnectionClosedError
except Exception as exc:
    print("missing dependency:", exc, file=sys.stderr)
    print("install: pip install -r scripts/requirements.txt", file=sys.stderr)
    sys.exit(2)

from lk_smoke import run_signal_smoke, setup_logging

ULTRAVOX_API_URL = os.getenv("ULTRAVOX_API_URL", "https://api.ultravox.ai/api")
ULTRAVOX_API_KEY = os.getenv("ULTRAVOX_API_KEY", "")
UV_SYSTEM_PROMPT = os.getenv("UV_SYSTEM_PROMPT", "You are a helpful assistant. Keep answers short.")
UV_VOICE = os.getenv("UV_VOICE", "Mark")
TIMEOUT_SECONDS = float(os.getenv("WS_TIMEOUT", "10"))
MAX_MESSAGES = int(os.getenv("WS_MAX_MESSAGES", "0"))

log = logging.getLogger(__name__)


def create_call(api_url: str, api_key: str, system_prompt: str, voice: str) -> str:
    """Create a call and return the websocket URL the client joins it through."""
    if not api_key:
        raise RuntimeError("ULTRAVOX_API_KEY is required")
    body = json.dumps({"systemPrompt": system_prompt, "voice": voice}).encode("utf-8")
    req = urllib.request.Request(
        f"{api_url.rstrip('/')}/calls",
        data=body,
        headers={"Content-Type": "application/json", "x-api-key": api_key},
        method="POST",
    )
    with urllib.request.urlopen(req, timeout=TIMEOUT_SECONDS) as resp:
        log.info("create call: HTTP %s", resp.status)
        raw = resp.read()
    data = json.loads(raw)
    join_url = data.get("joinUrl") if isinstance(data, dict) else None
    if not isinstance(join_url, str) or not join_url:
        raise RuntimeError(f"create call response has no joinUrl: {raw[:200]!r}")
    return join_url


def parse_room_info(message: str) -> Tuple[str, str]:
    try:
        data = json.loads(message)
    except ValueError as exc:
        raise ValueError(f"room info is not JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError("room info must be a JSON object")
    room_url = data.get("roomUrl")
    token = data.get("token")
    if not isinstance(room_url, str) or not isinstance(token, str):
        raise ValueError("room info needs string roomUrl and token")
    return room_url, token


async def wait_room_info(join: ClientConnection) -> Tuple[str, str]:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + TIMEOUT_SECONDS
    while True:
        remaining = deadline - loop.time()
        if remaining <= 0:
            raise TimeoutError("timed out waiting for room info")
        msg = await asyncio.wait_for(join.recv(), timeout=remaining)
        # binary frames on the join socket are media, not room info
        if isinstance(msg, str) and msg:
            log.debug("room info: %s", msg)
            return parse_room_info(msg)


async def drain_join(join: ClientConnection) -> None:
    try:
        async for msg in join:
            log.debug("join socket: %d bytes", len(msg))
    except ConnectionClosedError as exc:
        log.warning("join socket dropped: %s", exc)


async def main() -> None:
    setup_logging()
    loop = asyncio.get_running_loop()
    join_url = await loop.run_in_executor(
        None, create_call, ULTRAVOX_API_URL, ULTRAVOX_API_KEY, UV_SYSTEM_PROMPT, UV_VOICE
    )
    # the call lives as long as the join socket, so it stays open for the whole smoke
    async with websockets.connect(join_url) as join:
        log.info("joined call: %s", join_url)
        room_url, token = await wait_room_info(join)
        log.info("room url: %s", room_url)
        drain = asyncio.create_task(drain_join(join))
        try:
            await run_signal_smoke(
                room_url, token, auth="query", open_timeout=TIMEOUT_SECONDS, max_messages=MAX_MESSAGES
            )
        finally:
            drain.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await drain


if __name__ == "__main__":
    asyncio.run(main())
