from unittest.mock import MagicMock

from sqlalchemy.exc import OperationalError

import prestart


def _engine(failures):
    engine = MagicMock()
    attempts = {"n": 0}

    def connect():
        attempts["n"] += 1
        if attempts["n"] <= failures:
            raise OperationalError("SELECT 1", {}, Exception("refused"))
        return MagicMock()

    engine.connect.side_effect = connect
    return engine, attempts


def test_waits_until_database_answers(monkeypatch):
    monkeypatch.setattr(prestart.time, "sleep", lambda s: None)
    engine, attempts = _engine(failures=2)
    assert prestart.wait_for_database(engine, max_retries=5, delay=0) is True
    assert attempts["n"] == 3


def test_gives_up_after_max_retries(monkeypatch):
    monkeypatch.setattr(prestart.time, "sleep", lambda s: None)
    engine, attempts = _engine(failures=10)
    assert prestart.wait_for_database(engine, max_retries=3, delay=0) is False
    assert attempts["n"] == 3
