"""Tests for request/response shaping and diagnostics."""

from inoforge.models import CompileRequest, CompileResponse, Diagnostic, DiagnosticKind


class TestCompileRequest:
    def test_from_json_full(self):
        req = CompileRequest.from_json({
            "code": "void setup(){}", "board": "Arduino Uno",
            "libraries": ["Servo", "ArduinoJson"], "verbose": True,
        })
        assert req.code == "void setup(){}"
        assert req.board == "Arduino Uno"
        assert req.libraries == ["Servo", "ArduinoJson"]
        assert req.verbose is True

    def test_from_json_defaults(self):
        req = CompileRequest.from_json({"code": "x", "board": "y"})
        assert req.libraries == []
        assert req.verbose is False

    def test_from_json_not_a_dict(self):
        req = CompileRequest.from_json(None)
        assert req.code == ""
        assert req.board == ""
        req = CompileRequest.from_json(["code"])
        assert req.code == ""

    def test_from_json_drops_bad_types(self):
        req = CompileRequest.from_json({"code": 42, "board": None, "libraries": ["Servo", 3, None]})
        assert req.code == ""
        assert req.board == ""
        assert req.libraries == ["Servo"]

    def test_libraries_not_a_list(self):
        req = CompileRequest.from_json({"code": "x", "board": "y", "libraries": "Servo"})
        assert req.libraries == []

    def test_peer_payload(self):
        req = CompileRequest(code="c", board="ESP32 Dev Module", libraries=["A"])
        assert req.to_peer_payload("esp32:esp32:esp32") == {
            "sketch": "c", "fqbn": "esp32:esp32:esp32", "libraries": ["A"], "verbose": False,
        }


class TestCompileResponse:
    def test_failure_renders_diagnostics(self):
        resp = CompileResponse.failure(Diagnostic(DiagnosticKind.MISSING_CODE))
        assert resp.success is False
        assert resp.errors == ["No code provided"]
        assert resp.warnings == []
        assert resp.output == []

    def test_to_dict_omits_binary_on_failure(self):
        data = CompileResponse.failure(Diagnostic(DiagnosticKind.MISSING_BOARD)).to_dict()
        assert data == {"success": False, "errors": ["No board specified"], "warnings": [], "output": []}

    def test_to_dict_success(self):
        data = CompileResponse(success=True, binary="AA==", size=1, output=["done"]).to_dict()
        assert data["binary"] == "AA=="
        assert data["size"] == 1
        assert data["errors"] == []

    def test_from_dict_tolerates_missing_lists(self):
        resp = CompileResponse.from_dict({"success": False, "errors": None})
        assert resp.errors == []
        assert resp.binary is None

    def test_from_dict_ignores_non_int_size(self):
        resp = CompileResponse.from_dict({"success": True, "binary": "AA==", "size": "12"})
        assert resp.size is None


class TestDiagnostic:
    def test_service_error_message(self):
        d = Diagnostic(DiagnosticKind.SERVICE_ERROR, {"status": 500, "body": "boom"})
        assert str(d) == "Compilation service error: 500 - boom"

    def test_not_configured_mentions_variable(self):
        text = str(Diagnostic(DiagnosticKind.SERVICE_NOT_CONFIGURED))
        assert text.startswith("Compilation service not configured")
        assert "COMPILE_SERVICE_URL" in text

    def test_braces_message(self):
        d = Diagnostic(DiagnosticKind.UNBALANCED_BRACES, {"opened": 3, "closed": 2})
        assert str(d) == "Unbalanced braces: every '{' needs a matching '}' (found 3 '{' and 2 '}')"

    def test_context_values_with_braces_are_not_reformatted(self):
        d = Diagnostic(DiagnosticKind.TOOLCHAIN_ERROR, {"line": "error: expected '}' at {end}"})
        assert str(d) == "error: expected '}' at {end}"

    def test_every_kind_renders(self):
        samples = {
            "reason": "r", "status": 1, "body": "b", "opened": 1, "closed": 0, "function": "loop",
            "line": 1, "text": "t", "library": "l", "tool": "arduino-cli", "seconds": 1,
        }
        for kind in DiagnosticKind:
            assert str(Diagnostic(kind, samples))
