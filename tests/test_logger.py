"""日志配置测试"""
import json
import logging

from utils.logger import JsonFormatter, setup_logging


def test_setup_replaces_handlers():
    setup_logging("DEBUG")
    setup_logging("WARNING")
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.level == logging.WARNING


def test_json_formatter():
    record = logging.LogRecord("core.ledger", logging.INFO, __file__, 1, "loan %s added", ("L1",), None)
    data = json.loads(JsonFormatter().format(record))
    assert data["level"] == "INFO"
    assert data["logger"] == "core.ledger"
    assert data["message"] == "loan L1 added"
