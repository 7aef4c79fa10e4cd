import time

import jwt

TOKEN_ALG = "HS256"


def make_token(api_key: str, api_secret: str, room: str, identity: str, ttl: int = 3600) -> str:
    """Sign a LiveKit access token that only grants joining ``room``."""
    if not api_key or not api_secret:
        raise RuntimeError("LIVEKIT_API_KEY and LIVEKIT_API_SECRET are required to mint a token")
    now = int(time.time())
    payload = {
        "iss": api_key,
        "sub": identity,
        "nbf": now,
        "exp": now + ttl,
        "video": {"room": room, "roomJoin": True},
    }
    return jwt.encode(payload, api_secret, algorithm=TOKEN_ALG)


def resolve_token(
    token: str,
    api_key: str,
    api_secret: str,
    room: str,
    identity: str,
    ttl: int = 3600,
) -> str:
    # a pre-issued token is opaque here; the server decides whether it is valid
    if token:
        return token
    return make_token(api_key, api_secret, room, identity, ttl)
