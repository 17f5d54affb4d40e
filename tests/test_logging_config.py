"""
Tests for the structured logging setup.
"""

import importlib
import json
import logging
import sys
import warnings

from otpflow.core.logging_config import CustomJsonFormatter


def test_json_formatter_adds_standard_fields():
    formatter = CustomJsonFormatter('%(timestamp)s %(level)s %(logger)s %(module)s %(funcName)s %(message)s')
    record = logging.LogRecord("otpflow.test", logging.WARNING, __file__, 12, "Resend failed", None, None)

    data = json.loads(formatter.format(record))

    assert data["message"] == "Resend failed"
    assert data["level"] == "WARNING"
    assert data["logger"] == "otpflow.test"
    assert data["line"] == 12
    assert data["timestamp"]


def test_import_emits_no_deprecation_warning(monkeypatch):
    cached = [name for name in sys.modules if name.startswith("pythonjsonlogger") or name == "otpflow.core.logging_config"]
    for name in cached:
        monkeypatch.delitem(sys.modules, name)

    with warnings.catch_warnings():
        warnings.simplefilter("error", DeprecationWarning)
        importlib.import_module("otpflow.core.logging_config")
