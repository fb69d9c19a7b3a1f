"""Tests for the uvicorn target and the command line entry point."""

from fastapi import FastAPI
from uvicorn.importer import import_from_string

from hr_admin import __main__ as cli


class TestServeTarget:
    def test_uvicorn_target_resolves(self):
        app = import_from_string("hr_admin.api.app:app")
        assert isinstance(app, FastAPI)
        assert app.title == "HR Admin API"

    def test_serve_command_loads_the_app(self, monkeypatch):
        calls = {}

        def fake_run(target, **kwargs):
            calls["app"] = import_from_string(target)
            calls.update(kwargs)

        monkeypatch.setattr(cli.uvicorn, "run", fake_run)

        assert cli.main(["serve", "--host", "127.0.0.1", "--port", "9001"]) == 0
        assert isinstance(calls["app"], FastAPI)
        assert calls["host"] == "127.0.0.1"
        assert calls["port"] == 9001

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 1
        assert "reconcile-counts" in capsys.readouterr().out
