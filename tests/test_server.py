"""Tests for the startup sequence: binding, readiness logging, exit status."""

import logging
import os
import socket
import subprocess
import sys
from pathlib import Path

import pytest
import uvicorn

import guardpost.server as server_mod
from guardpost.config import Settings
from guardpost.config import load_settings
from guardpost.errors import BindError
from guardpost.server import bind_socket
from guardpost.server import configure_logging
from guardpost.server import serve

REPO_ROOT = Path(__file__).resolve().parents[1]


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        return probe.getsockname()[1]


@pytest.fixture
def occupied_port():
    """A port held by a listening socket for the duration of the test."""

    holder = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    holder.bind(("127.0.0.1", 0))
    holder.listen(1)
    try:
        yield holder.getsockname()[1]
    finally:
        holder.close()


def test_bind_socket_listens_on_requested_port():
    port = _free_port()
    sock = bind_socket("127.0.0.1", port)
    try:
        assert sock.getsockname()[1] == port
        with socket.create_connection(("127.0.0.1", port), timeout=2):
            pass
    finally:
        sock.close()


def test_bind_socket_on_busy_port_raises(occupied_port):
    with pytest.raises(BindError) as excinfo:
        bind_socket("127.0.0.1", occupied_port)

    assert excinfo.value.port == occupied_port
    assert str(occupied_port) in str(excinfo.value)


def test_serve_logs_readiness_and_releases_socket(monkeypatch, caplog, collections):
    handed_over = []
    monkeypatch.setattr(uvicorn.Server, "run", lambda self, sockets=None: handed_over.extend(sockets))
    port = _free_port()

    with caplog.at_level(logging.INFO, logger="guardpost.server"):
        serve(Settings(host="127.0.0.1", port=port), collections)

    assert f"Server is running on port {port}" in caplog.text
    assert len(handed_over) == 1
    assert handed_over[0].fileno() == -1  # closed once uvicorn returns


def test_serve_uses_default_port_when_unset(monkeypatch, tmp_path, collections):
    bound = []

    class _FakeSocket:
        def close(self):
            pass

    def fake_bind(host, port):
        bound.append((host, port))
        return _FakeSocket()

    monkeypatch.setattr(server_mod, "bind_socket", fake_bind)
    monkeypatch.setattr(uvicorn.Server, "run", lambda self, sockets=None: None)

    serve(load_settings(environ={}, env_file=tmp_path / "absent.env"), collections)
    serve(load_settings(environ={"PORT": "8080"}, env_file=tmp_path / "absent.env"), collections)

    assert bound == [("0.0.0.0", 6001), ("0.0.0.0", 8080)]


def test_main_exits_non_zero_when_port_is_taken(monkeypatch, caplog, occupied_port):
    monkeypatch.setattr(server_mod, "get_settings", lambda: Settings(host="127.0.0.1", port=occupied_port))

    with caplog.at_level(logging.ERROR, logger="guardpost.server"):
        with pytest.raises(SystemExit) as excinfo:
            server_mod.main()

    assert excinfo.value.code == 1
    assert "Startup failed" in caplog.text


def test_configure_logging_falls_back_to_info():
    assert configure_logging("not-a-level") == logging.INFO
    assert configure_logging("warning") == logging.WARNING


def test_second_instance_process_exits_while_first_keeps_listening(occupied_port, tmp_path):
    env = dict(os.environ)
    env.update(PORT=str(occupied_port), HOST="127.0.0.1")
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO_ROOT), env.get("PYTHONPATH")]))

    result = subprocess.run(
        [sys.executable, "-m", "guardpost"],
        cwd=tmp_path,
        env=env,
        capture_output=True,
        text=True,
        timeout=60,
    )

    assert result.returncode == 1
    assert "Startup failed" in result.stderr
    with socket.create_connection(("127.0.0.1", occupied_port), timeout=2):
        pass


def test_readiness_line_means_socket_accepts_connections(monkeypatch, caplog, collections):
    port = _free_port()
    seen_at_run = []

    def fake_run(self, sockets=None):
        seen_at_run.append("Server is running on port" in caplog.text)
        with socket.create_connection(("127.0.0.1", port), timeout=2):
            pass

    monkeypatch.setattr(uvicorn.Server, "run", fake_run)

    with caplog.at_level(logging.INFO, logger="guardpost.server"):
        serve(Settings(host="127.0.0.1", port=port), collections)

    assert seen_at_run == [True]
