"""
Shared fixtures for qmaur tests.
"""

import json
import logging
from unittest.mock import MagicMock

import pytest


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo setup_logging between tests so caplog sees qmaur records."""
    logger = logging.getLogger("qmaur")
    yield
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep real user/system config files and env overrides out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.setattr("qmaur.config.config_locations", lambda: [])
    monkeypatch.delenv("QMAUR_AUR_URL", raising=False)
    monkeypatch.delenv("QMAUR_TIMEOUT", raising=False)


def rpc_body(results=None, type_="multiinfo", error=None):
    """Serialize an aurweb RPC v5 response."""
    data = {
        "version": 5,
        "type": type_,
        "resultcount": len(results or []),
        "results": results or [],
    }
    if error is not None:
        data["error"] = error
    return json.dumps(data).encode("utf-8")


def rpc_entry(name, version, **extra):
    """Minimal RPC package entry."""
    entry = {
        "ID": 1,
        "Name": name,
        "PackageBaseID": 1,
        "PackageBase": name,
        "Version": version,
        "Description": f"{name} description",
        "URL": f"https://example.org/{name}",
        "NumVotes": 10,
        "Popularity": 0.5,
        "OutOfDate": None,
        "Maintainer": "someone",
        "FirstSubmitted": 1500000000,
        "LastModified": 1600000000,
        "URLPath": f"/cgit/aur.git/snapshot/{name}.tar.gz",
    }
    entry.update(extra)
    return entry


def urlopen_returning(*bodies):
    """Mock for urllib.request.urlopen yielding the given bodies in order."""
    responses = []
    for body in bodies:
        response = MagicMock()
        response.read.return_value = body
        cm = MagicMock()
        cm.__enter__.return_value = response
        cm.__exit__.return_value = False
        responses.append(cm)
    return MagicMock(side_effect=responses)
