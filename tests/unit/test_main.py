"""
Unit Tests for the command line entry point
"""

from transtrack import main as entry


class TestCommandLine:
    def test_defaults_to_api(self, monkeypatch):
        calls = []
        monkeypatch.setattr(entry, "run_api", lambda host, port: calls.append(("api", host, port)))

        entry.main([])

        assert calls == [("api", entry.settings.host, entry.settings.port)]

    def test_api_bind_overrides(self, monkeypatch):
        calls = []
        monkeypatch.setattr(entry, "run_api", lambda host, port: calls.append((host, port)))

        entry.main(["api", "--host", "127.0.0.1", "--port", "9001"])

        assert calls == [("127.0.0.1", 9001)]

    def test_worker(self, monkeypatch):
        calls = []
        monkeypatch.setattr(entry, "run_worker", lambda: calls.append("worker"))

        entry.main(["worker"])

        assert calls == ["worker"]
