import io
import logging

import pytest

from calcviz import cache
from calcviz.__main__ import main
from calcviz.config import clear_cache
from calcviz.logging_config import setup_logging


@pytest.fixture(autouse=True)
def reset_logger(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("CALCVIZ_CONFIG", raising=False)
    clear_cache()
    cache.clear_cache()
    logger = logging.getLogger("calcviz")
    yield logger
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    clear_cache()


def test_stream_handler():
    stream = io.StringIO()
    setup_logging(logging.DEBUG, stream=stream)
    logging.getLogger("calcviz.test").debug("hello")
    text = stream.getvalue()
    assert "Logging initialized." in text
    assert "calcviz.test - DEBUG - hello" in text


def test_repeated_setup_keeps_one_handler(reset_logger):
    setup_logging(stream=io.StringIO())
    setup_logging(stream=io.StringIO())
    assert len(reset_logger.handlers) == 1


def test_log_file(tmp_path):
    path = tmp_path / "calcviz.log"
    setup_logging(logging.INFO, log_file=str(path), stream=io.StringIO())
    logging.getLogger("calcviz.test").info("to file")
    for handler in logging.getLogger("calcviz").handlers:
        handler.flush()
    assert "to file" in path.read_text(encoding="utf-8")


def test_cli_verbose_logs_to_stderr(capsys):
    assert main(["-vv", "area", "--partitions", "2"]) == 0
    out, err = capsys.readouterr()
    assert "Logging initialized." in err
    assert "Logging initialized." not in out
