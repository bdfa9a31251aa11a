import asyncio
import json
from pathlib import Path

import pytest

from core.errors import ToolIOError, ValidationError
from core.models import RunScriptRequest
from tools.paths import PathResolver
from tools.scripts import ScriptRunner


class FakeProcess:
    def __init__(self, returncode: int, stdout: bytes = b"", stderr: bytes = b""):
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr

    async def communicate(self):
        return self._stdout, self._stderr


def _fake_spawn(monkeypatch, process: FakeProcess) -> list[dict]:
    calls: list[dict] = []

    async def fake_exec(*args, **kwargs):
        calls.append({"args": args, "kwargs": kwargs})
        return process

    monkeypatch.setattr("tools.scripts.asyncio.create_subprocess_exec", fake_exec)
    return calls


def _write_manifest(root: Path, scripts: dict[str, str]) -> None:
    (root / "package.json").write_text(json.dumps({"scripts": scripts}), encoding="utf-8")


def test_run_script_passes_name_as_separate_argument(tmp_path: Path, monkeypatch):
    _write_manifest(tmp_path, {"build": "vite build"})
    monkeypatch.setattr("tools.scripts.shutil.which", lambda name: None)
    calls = _fake_spawn(monkeypatch, FakeProcess(0, b"built\n", b""))
    runner = ScriptRunner(PathResolver(tmp_path), "npm")

    result = asyncio.run(runner.run_npm_script(RunScriptRequest(script_name="build")))
    assert result == {
        "script": "build",
        "exit_code": 0,
        "stdout": "built\n",
        "stderr": "",
        "success": True,
    }
    assert calls[0]["args"] == ("npm", "run", "build")
    assert calls[0]["kwargs"]["cwd"] == str(tmp_path)


def test_run_script_failure_is_reported_not_raised(tmp_path: Path, monkeypatch):
    _write_manifest(tmp_path, {"test": "jest"})
    _fake_spawn(monkeypatch, FakeProcess(1, b"", b"1 test failed\n"))
    runner = ScriptRunner(PathResolver(tmp_path), "npm")

    result = asyncio.run(runner.run_npm_script(RunScriptRequest(script_name="test")))
    assert result["success"] is False
    assert result["exit_code"] == 1
    assert result["stderr"] == "1 test failed\n"


def test_run_script_rejects_unknown_script(tmp_path: Path, monkeypatch):
    _write_manifest(tmp_path, {"build": "vite build", "dev": "vite"})
    calls = _fake_spawn(monkeypatch, FakeProcess(0))
    runner = ScriptRunner(PathResolver(tmp_path), "npm")

    with pytest.raises(ValidationError) as excinfo:
        asyncio.run(runner.run_npm_script(RunScriptRequest(script_name="build; rm -rf /")))
    assert excinfo.value.extra["available"] == ["build", "dev"]
    assert calls == []


def test_run_script_rejects_option_like_names(tmp_path: Path, monkeypatch):
    _fake_spawn(monkeypatch, FakeProcess(0))
    runner = ScriptRunner(PathResolver(tmp_path), "npm", enforce_allowlist=False)
    with pytest.raises(ValidationError):
        asyncio.run(runner.run_npm_script(RunScriptRequest(script_name="--version")))


def test_run_script_without_manifest_skips_allowlist(tmp_path: Path, monkeypatch):
    calls = _fake_spawn(monkeypatch, FakeProcess(0))
    runner = ScriptRunner(PathResolver(tmp_path), "npm")
    asyncio.run(runner.run_npm_script(RunScriptRequest(script_name="lint")))
    assert calls[0]["args"][-1] == "lint"


def test_run_script_uses_cwd_under_root(tmp_path: Path, monkeypatch):
    (tmp_path / "web").mkdir()
    _write_manifest(tmp_path / "web", {"dev": "vite"})
    calls = _fake_spawn(monkeypatch, FakeProcess(0))
    runner = ScriptRunner(PathResolver(tmp_path), "npm")

    request = RunScriptRequest.model_validate({"script": "dev", "cwd": "web"})
    asyncio.run(runner.run_npm_script(request))
    assert calls[0]["kwargs"]["cwd"] == str(tmp_path / "web")


def test_run_script_missing_cwd_is_io_error(tmp_path: Path, monkeypatch):
    _fake_spawn(monkeypatch, FakeProcess(0))
    runner = ScriptRunner(PathResolver(tmp_path), "npm")
    with pytest.raises(ToolIOError):
        asyncio.run(
            runner.run_npm_script(RunScriptRequest(script_name="dev", cwd="missing"))
        )


def test_run_script_broken_manifest_is_io_error(tmp_path: Path, monkeypatch):
    (tmp_path / "package.json").write_text("{not json", encoding="utf-8")
    _fake_spawn(monkeypatch, FakeProcess(0))
    runner = ScriptRunner(PathResolver(tmp_path), "npm")
    with pytest.raises(ToolIOError, match="package.json"):
        asyncio.run(runner.run_npm_script(RunScriptRequest(script_name="dev")))


def test_run_script_missing_binary_reports_failure(tmp_path: Path):
    runner = ScriptRunner(
        PathResolver(tmp_path), str(tmp_path / "no-such-npm"), enforce_allowlist=False
    )
    result = asyncio.run(runner.run_npm_script(RunScriptRequest(script_name="build")))
    assert result["success"] is False
    assert result["exit_code"] is None
    assert result["stderr"]


def test_run_script_resolves_binary_on_path(tmp_path: Path, monkeypatch):
    calls = _fake_spawn(monkeypatch, FakeProcess(0))
    lookups: list[str] = []

    def fake_which(name: str):
        lookups.append(name)
        return r"C:\Program Files\nodejs\npm.CMD"

    monkeypatch.setattr("tools.scripts.shutil.which", fake_which)
    runner = ScriptRunner(PathResolver(tmp_path), "npm", enforce_allowlist=False)
    asyncio.run(runner.run_npm_script(RunScriptRequest(script_name="dev")))
    assert lookups == ["npm"]
    assert calls[0]["args"] == (r"C:\Program Files\nodejs\npm.CMD", "run", "dev")
