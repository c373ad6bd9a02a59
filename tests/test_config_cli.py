import json
import signal
import threading
from types import SimpleNamespace

import pytest

from telemetry_pusher import cli
from telemetry_pusher.config import Settings, load_settings
from telemetry_pusher.dispatcher import TelemetryDispatcher
from telemetry_pusher.errors import ConfigError


class _OkSession:
    def __init__(self):
        self.bodies = []

    def post(self, url, **kwargs):
        self.bodies.append(kwargs["json"])
        return SimpleNamespace(status_code=200, text="")

    def close(self):
        pass


def _prepare(monkeypatch, tmp_path, doc):
    data_file = tmp_path / "data.json"
    data_file.write_text(json.dumps(doc), encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("server", "http://tb.local")
    monkeypatch.setenv("device_token", "token-123456789")
    monkeypatch.setattr(cli, "install_stop_handlers", lambda stop: None)

    session = _OkSession()
    monkeypatch.setattr(
        cli,
        "TelemetryDispatcher",
        lambda settings, timeout=None: TelemetryDispatcher(settings, session=session, timeout=timeout),
    )
    return str(data_file), session


def test_settings_from_mapping():
    s = load_settings({"server": "http://x", "device_token": "abc"})
    assert s == Settings(server="http://x", device_token="abc")


def test_upper_case_names_are_accepted():
    s = load_settings({"SERVER": "http://x", "DEVICE_TOKEN": "abc"})
    assert s.server == "http://x"


@pytest.mark.parametrize(
    "env",
    [{}, {"server": "http://x"}, {"device_token": "abc"}, {"server": "", "device_token": "abc"}],
)
def test_missing_config_fails(env):
    with pytest.raises(ConfigError):
        load_settings(env)


def test_masked_token_handles_short_tokens():
    assert Settings(server="s", device_token="ABCDEFGHIJK").masked_token() == "ABCDEFGH..."
    assert Settings(server="s", device_token="abc").masked_token() == "abc..."


def test_parser_defaults():
    args = cli.build_parser().parse_args([])
    assert (args.interval, args.count, args.data_file) == (5, 1, "data.json")
    assert args.timeout is None


@pytest.mark.parametrize("argv", [["-i", "-1"], ["-c", "x"], ["--count", "-3"]])
def test_parser_rejects_bad_numbers(argv):
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(argv)


def test_main_sends_every_record_for_each_round(monkeypatch, tmp_path):
    doc = {"random_key": "v", "data": [{"s": {"v": 4}}, {"t": 1}]}
    data_file, session = _prepare(monkeypatch, tmp_path, doc)

    rc = cli.main(["-f", data_file, "-i", "0", "-c", "2", "--seed", "1"])

    assert rc == 0
    assert len(session.bodies) == 4
    assert all(set(b) == {"ts", "values"} for b in session.bodies)
    assert 1 <= session.bodies[0]["values"]["s"]["v"] <= 8


def test_main_exits_non_zero_without_config(monkeypatch, tmp_path):
    data_file, session = _prepare(monkeypatch, tmp_path, [{"a": 1}])
    for name in ("server", "SERVER"):
        monkeypatch.delenv(name, raising=False)

    assert cli.main(["-f", data_file, "-i", "0"]) == 1
    assert session.bodies == []


def test_main_exits_non_zero_on_bad_data_file(monkeypatch, tmp_path):
    _, session = _prepare(monkeypatch, tmp_path, {"data": "nope"})

    assert cli.main(["-f", "data.json", "-i", "0"]) == 1
    assert session.bodies == []


def test_first_signal_stops_loop_and_second_uses_default_handler():
    saved = {s: signal.getsignal(s) for s in (signal.SIGINT, signal.SIGTERM)}
    stop = threading.Event()
    try:
        cli.install_stop_handlers(stop)
        handler = signal.getsignal(signal.SIGINT)
        assert callable(handler)
        assert signal.getsignal(signal.SIGTERM) is handler

        handler(signal.SIGINT, None)

        assert stop.is_set()
        # a hung request must still be killable by the next SIGINT/SIGTERM
        assert signal.getsignal(signal.SIGINT) == signal.SIG_DFL
        assert signal.getsignal(signal.SIGTERM) == signal.SIG_DFL
    finally:
        for s, h in saved.items():
            signal.signal(s, h)
