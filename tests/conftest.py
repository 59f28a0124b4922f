import json
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

ROOT = Path(__file__).resolve().parent.parent

# Same layout as the installed package, plus server/ for the mock app
sys.path.insert(0, str(ROOT / "client"))
sys.path.insert(0, str(ROOT / "server"))


def make_response(status_code=200, body=None, text=None):
    """A stand-in for requests.Response carrying a JSON (or raw text) body"""
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.text = text if text is not None else json.dumps(body if body is not None else {})
    response.json.side_effect = lambda: json.loads(response.text)
    return response


@pytest.fixture
def http():
    """
    Patch requests.Session in the client module.

    Yields the session mock used inside the ``with`` block; set
    ``http.request.return_value`` to control the response. ``http.context_manager``
    is the object the client enters and exits.
    """
    with patch("authy_client.authy_api_caller.requests.Session") as session_cls:
        session = session_cls.return_value.__enter__.return_value
        session.context_manager = session_cls.return_value
        session.request.return_value = make_response(200, {"success": True})
        yield session


@pytest.fixture
def client():
    from authy_client import create_client
    return create_client("test-api-key")
