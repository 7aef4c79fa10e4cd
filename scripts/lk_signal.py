from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional, Union
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import websockets
from websockets.exceptions import ConnectionClosedError

SIGNAL_PATH = "/rtc"
AUTH_MODES = ("header", "query")


@dataclass(frozen=True)
class Opened:
    url: str


@dataclass(frozen=True)
class MessageReceived:
    payload: Union[str, bytes]


@dataclass(frozen=True)
class Closed:
    code: Optional[int]
    reason: str = ""


ConnectionEvent = Union[Opened, MessageReceived, Closed]


def signal_url(base_url: str, token: Optional[str] = None) -> str:
    """Point ``base_url`` at the signaling endpoint, optionally carrying ``token``."""
    parts = urlsplit(base_url)
    path = parts.path.rstrip("/")
    if not path.endswith(SIGNAL_PATH):
        path += SIGNAL_PATH
    query = parse_qsl(parts.query, keep_blank_values=True)
    if token:
        query.append(("access_token", token))
    return urlunsplit((parts.scheme, parts.netloc, path, urlencode(query), ""))


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def format_payload(payload: Union[str, bytes]) -> str:
    if isinstance(payload, bytes):
        return f"<{len(payload)} bytes> {payload.hex()}"
    return payload


def describe(event: ConnectionEvent) -> str:
    if isinstance(event, Opened):
        return f"Connected to the server ({event.url})"
    if isinstance(event, MessageReceived):
        return f"Received: {format_payload(event.payload)}"
    if isinstance(event, Closed):
        return f"Disconnected from the server (code={event.code} reason={event.reason!r})"
    raise TypeError(f"unknown connection event: {event!r}")


async def connection_events(
    base_url: str,
    token: str,
    auth: str = "header",
    open_timeout: float = 10.0,
    max_messages: int = 0,
) -> AsyncIterator[ConnectionEvent]:
    # handshake failures propagate from websockets before any event is yielded
    if auth not in AUTH_MODES:
        raise ValueError(f"auth must be one of {AUTH_MODES}, got {auth!r}")

    url = signal_url(base_url)
    if auth == "header":
        target, headers = url, auth_headers(token)
    else:
        target, headers = signal_url(base_url, token), None

    received = 0
    async with websockets.connect(target, additional_headers=headers, open_timeout=open_timeout) as ws:
        yield Opened(url=url)
        try:
            async for message in ws:
                yield MessageReceived(payload=message)
                received += 1
                if max_messages and received >= max_messages:
                    break
        except ConnectionClosedError:
            # abnormal closure still ends with a Closed event carrying code 1006
            pass
    yield Closed(code=ws.close_code, reason=ws.close_reason or "")
