import pytest
from sqlalchemy import text
import bridge
from config import Config, load_config, BAUDRATE, DB_PATH, SERIAL_PORT


@pytest.fixture
def calls(monkeypatch):
    calls = []

    def fake_start_worker(cfg, session_factory):
        calls.append((cfg, session_factory))
        return "source"

    monkeypatch.setattr(bridge, "start_worker", fake_start_worker)
    return calls


def test_start_prepares_store_then_starts_worker(cfg, calls):
    assert bridge.start(cfg) == "source"
    assert len(calls) == 1
    assert calls[0][0] is cfg
    with calls[0][1]() as sess:
        assert sess.execute(text("SELECT count(*) FROM leituras_brutas")).scalar() == 0


def test_unusable_store_exits_before_ingesting(tmp_path, calls, capsys):
    cfg = Config(serial_port="loop://", db_path=str(tmp_path / "missing" / "readings.db"))
    with pytest.raises(SystemExit) as exc:
        bridge.start(cfg)
    assert exc.value.code == 1
    assert calls == []
    assert "[bridge] Database setup failed:" in capsys.readouterr().out


def test_default_config_uses_constants():
    cfg = load_config()
    assert (cfg.serial_port, cfg.baudrate, cfg.db_path) == (SERIAL_PORT, BAUDRATE, DB_PATH)
    assert cfg.baudrate == 115200


def test_read_only_store_exits_before_ingesting(tmp_path, calls, capsys):
    path = tmp_path / "arduino_buffer.db"
    path.touch()
    path.chmod(0o444)
    cfg = Config(serial_port="loop://", db_path=f"file:{path}?mode=ro&uri=true")
    with pytest.raises(SystemExit) as exc:
        bridge.start(cfg)
    assert exc.value.code == 1
    assert calls == []
    out = capsys.readouterr().out
    assert "[bridge] Database setup failed:" in out
    assert "readonly" in out
