import logging

import pytest

from solbolt.utils.logging import TRACE, ColoredFormatter, get_logger, log_trace, setup_logging


@pytest.fixture(autouse=True)
def restore_solbolt_logger():
    yield
    setup_logging(quiet=True)


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__(TRACE)
        self.records = []

    def emit(self, record):
        self.records.append(record)


def test_verbose_enables_trace_and_http_libraries():
    root = setup_logging(verbose=True)
    assert root.level == TRACE
    assert logging.getLogger("urllib3").level == logging.DEBUG

    handler = ListHandler()
    root.addHandler(handler)
    log_trace(get_logger("assembly"), "line %d -> %s", 3, "108:163")
    assert [r.getMessage() for r in handler.records] == ["line 3 -> 108:163"]
    assert handler.records[0].levelname == "TRACE"


def test_default_level_hides_trace_and_http_libraries():
    root = setup_logging(quiet=True)
    assert root.level == logging.WARNING
    assert root.handlers == []
    assert logging.getLogger("urllib3").level == logging.WARNING

    handler = ListHandler()
    root.addHandler(handler)
    log_trace(get_logger("assembly"), "hidden")
    assert handler.records == []


def test_log_file_records_thread_name(tmp_path):
    log_file = tmp_path / "solbolt.log"
    root = setup_logging(quiet=True, log_file=str(log_file))
    get_logger("poller").debug("compile task t1 pending")
    for handler in root.handlers:
        handler.close()

    line = log_file.read_text().strip()
    assert " - MainThread - solbolt.poller - DEBUG - compile task t1 pending" in line


def test_colored_formatter_restores_level_name():
    formatter = ColoredFormatter(fmt="%(levelname)s: %(message)s", use_colors=True)
    record = logging.LogRecord("solbolt", logging.WARNING, __file__, 1, "stale", None, None)
    assert formatter.format(record).endswith(": stale")
    assert record.levelname == "WARNING"
