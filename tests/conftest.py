import sys
from pathlib import Path

import pytest


SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPTS) not in sys.path:
    sys.path.insert(0, str(SCRIPTS))


TEST_SECRET = "pytest-secret-0123456789abcdef0123456789"


@pytest.fixture
def api_secret() -> str:
    return TEST_SECRET


@pytest.fixture
def ws_base_url(unused_tcp_port: int) -> str:
    return f"ws://127.0.0.1:{unused_tcp_port}"
