import time
import pytest
from sqlalchemy import select
from config import Config
from models import setup_database, RawReading


@pytest.fixture
def cfg(tmp_path):
    return Config(serial_port="loop://", baudrate=115200, db_path=str(tmp_path / "readings.db"))


@pytest.fixture
def session_factory(cfg):
    return setup_database(cfg.db_path)


@pytest.fixture
def stored(session_factory):
    """Returns a callable listing stored messages in id order."""
    def _stored():
        with session_factory() as sess:
            return list(sess.scalars(select(RawReading.raw_message).order_by(RawReading.id)))
    return _stored


def wait_for(predicate, timeout=3.0, interval=0.02):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
