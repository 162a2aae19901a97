"""Tests for the inoforge CLI."""

import base64
import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from inoforge.cli import main
from inoforge.models import CompileResponse

SKETCH = "void setup(){} void loop(){}"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def no_service_env(monkeypatch):
    monkeypatch.delenv("COMPILE_SERVICE_URL", raising=False)


class TestBoards:
    def test_lists_boards(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["boards"])
        assert result.exit_code == 0
        assert "Supported boards (16)" in result.output
        assert "esp32:esp32:esp32" in result.output

    def test_json(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["boards", "--json"])
        data = json.loads(result.output)
        assert {"name": "Arduino Uno", "fqbn": "arduino:avr:uno"} in data

    def test_includes_configured_boards(self, runner):
        with runner.isolated_filesystem():
            Path("inoforge.toml").write_text('[boards]\n"Lab Board" = "esp32:esp32:lab"\n')
            result = runner.invoke(main, ["boards"])
        assert "Lab Board" in result.output

    def test_bad_config(self, runner):
        with runner.isolated_filesystem():
            Path("inoforge.toml").write_text('[server]\nport = "x"\n')
            result = runner.invoke(main, ["boards"])
        assert result.exit_code == 1
        assert "Error:" in result.output


class TestResolve:
    def test_known(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["resolve", "NodeMCU 1.0"])
        assert result.output.strip() == "esp8266:esp8266:nodemcuv2"

    def test_unknown_echoed(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["resolve", "teensy:avr:teensy41"])
        assert result.output.strip() == "teensy:avr:teensy41"


class TestCheck:
    def test_clean_sketch(self, runner):
        with runner.isolated_filesystem():
            Path("blink.ino").write_text(SKETCH)
            result = runner.invoke(main, ["check", "blink.ino"])
        assert result.exit_code == 0
        assert "No structural problems found" in result.output

    def test_broken_sketch(self, runner):
        with runner.isolated_filesystem():
            Path("broken.ino").write_text("void setup() {\n  int x = 5\n")
            result = runner.invoke(main, ["check", "broken.ino"])
        assert result.exit_code == 1
        assert "Missing required function: void loop()" in result.output
        assert "Warning: Line 2" in result.output

    def test_reads_utf8_sketch(self, runner):
        with runner.isolated_filesystem():
            Path("temp.ino").write_bytes("// Température °C\nvoid setup() {}\nvoid loop() {}\n".encode("utf-8"))
            result = runner.invoke(main, ["check", "temp.ino"])
        assert result.exit_code == 0, result.output
        assert "No structural problems found" in result.output

    def test_board_reports_target(self, runner):
        with runner.isolated_filesystem():
            Path("blink.ino").write_text(SKETCH)
            result = runner.invoke(main, ["check", "blink.ino", "--board", "Arduino Nano"])
        assert result.exit_code == 0
        assert "Target: arduino:avr:nano" in result.output


class TestCompile:
    def test_unconfigured_remote_fails(self, runner):
        with runner.isolated_filesystem():
            Path("s.ino").write_text(SKETCH)
            result = runner.invoke(main, ["compile", "s.ino", "--board", "ESP32 Dev Module"])
        assert result.exit_code == 1
        assert "Compilation service not configured" in result.output

    def test_mock_backend_writes_placeholder(self, runner):
        with runner.isolated_filesystem():
            Path("s.ino").write_text(SKETCH)
            result = runner.invoke(main, ["compile", "s.ino", "--board", "ESP32 Dev Module",
                                          "--backend", "mock", "--output", "fw.bin"])
            assert result.exit_code == 0
            assert "esp32:esp32:esp32" in Path("fw.bin").read_text()
        assert "not flashable" in result.output

    def test_mock_backend_json(self, runner):
        with runner.isolated_filesystem():
            Path("s.ino").write_text(SKETCH)
            result = runner.invoke(main, ["compile", "s.ino", "--board", "Arduino Uno", "--backend", "mock", "--json"])
        data = json.loads(result.output)
        assert data["success"] is True
        assert data["size"] == 15000 + 34

    @patch("inoforge.compilers.remote.RemoteCompiler.compile")
    def test_service_url_option(self, mock_compile, runner):
        mock_compile.return_value = CompileResponse(
            success=True, binary=base64.b64encode(b"\x01\x02").decode(), size=2, output=["done"],
        )
        with runner.isolated_filesystem():
            Path("s.ino").write_text(SKETCH)
            result = runner.invoke(main, ["compile", "s.ino", "--board", "Arduino Uno",
                                          "--service-url", "http://peer:3001", "--library", "Servo",
                                          "--output", "fw.bin"])
            assert result.exit_code == 0, result.output
            assert Path("fw.bin").read_bytes() == b"\x01\x02"
        request, fqbn = mock_compile.call_args.args
        assert fqbn == "arduino:avr:uno"
        assert request.libraries == ["Servo"]
        assert "Wrote 2 bytes to fw.bin" in result.output

    @patch("inoforge.compilers.remote.RemoteCompiler.compile")
    def test_remote_failure_exit_code(self, mock_compile, runner):
        mock_compile.return_value = CompileResponse(success=False, errors=["sketch.ino:1: error: boom"])
        with runner.isolated_filesystem():
            Path("s.ino").write_text(SKETCH)
            result = runner.invoke(main, ["compile", "s.ino", "--board", "Arduino Uno",
                                          "--service-url", "http://peer:3001"])
        assert result.exit_code == 1
        assert "Error: sketch.ino:1: error: boom" in result.output


class TestStatus:
    def test_unconfigured(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["status"])
        assert result.exit_code == 0
        assert "not configured" in result.output

    @patch("inoforge.compilers.remote.RemoteCompiler.health", return_value=True)
    def test_online_json(self, mock_health, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["status", "--json", "--service-url", "http://peer:3001"])
        data = json.loads(result.output)
        assert data["serviceConfigured"] is True
        assert data["serviceOnline"] is True

    @patch("inoforge.compilers.remote.RemoteCompiler.health", return_value=False)
    def test_offline(self, mock_health, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["status", "--service-url", "http://peer:3001"])
        assert "not reachable" in result.output


class TestServe:
    @patch("flask.Flask.run")
    def test_serve_uses_configured_port(self, mock_run, runner):
        with runner.isolated_filesystem():
            Path("inoforge.toml").write_text('[server]\nport = 8080\n')
            result = runner.invoke(main, ["serve"])
        assert result.exit_code == 0, result.output
        mock_run.assert_called_once_with(host="127.0.0.1", port=8080)

    @patch("flask.Flask.run")
    def test_peer_port_option(self, mock_run, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["peer", "--port", "4001"])
        assert result.exit_code == 0, result.output
        mock_run.assert_called_once_with(host="127.0.0.1", port=4001)
