"""Tests for QueryRecord and logging setup."""

import json
import logging

import pytest

from ipneigh.diagnostics import (
    LOG_ENV_VAR, ParseResult, QueryRecord, QueryStatus,
    dump_query_detail, dump_query_summary, resolve_log_level, setup_logging,
)


class TestResolveLogLevel:

    @pytest.mark.parametrize("value,level", [
        ("debug", logging.DEBUG),
        ("INFO", logging.INFO),
        ("Warning", logging.WARNING),
        ("warn", logging.WARNING),
        (" error ", logging.ERROR),
        ("critical", logging.CRITICAL),
        ("verbose", logging.INFO),
        ("", logging.INFO),
    ])
    def test_explicit(self, value, level):
        assert resolve_log_level(value) == level

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv(LOG_ENV_VAR, "debug")
        assert resolve_log_level() == logging.DEBUG

    def test_unset_defaults_to_info(self, monkeypatch):
        monkeypatch.delenv(LOG_ENV_VAR, raising=False)
        assert resolve_log_level() == logging.INFO


class TestSetupLogging:

    def test_handlers_replaced(self, monkeypatch):
        monkeypatch.delenv(LOG_ENV_VAR, raising=False)
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.INFO
        assert logger.name == "ipneigh"

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "ipneigh.log"
        logger = setup_logging(level=logging.ERROR, log_file=str(log_file))
        logger.debug("only in the file")
        for handler in logger.handlers:
            handler.flush()
        assert "only in the file" in log_file.read_text()
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


class TestQueryRecord:

    def _record(self):
        return QueryRecord(
            command=["ip", "neigh"],
            status=QueryStatus.PARSE_ERROR,
            returncode=0,
            raw_output="192.168.0.2 dev br-lan used 0/0/0 probes 6 FAILED\n",
            duration_ms=4.2,
            parse_result=ParseResult.FORMAT_ERROR,
            parse_detail="no link layer address found -> '192.168.0.2 dev br-lan ...'",
            error_message="no link layer address found",
            line_count=1,
        )

    def test_fresh_record_is_pending(self):
        record = QueryRecord(command=["ip", "neigh"])
        assert record.status == QueryStatus.PENDING
        assert record.to_dict()["status"] == "pending"

    def test_to_dict(self):
        data = self._record().to_dict()
        assert data["command"] == "ip neigh"
        assert data["status"] == "parse-error"
        assert data["parse_result"] == "format-error"
        assert data["raw_output_lines"] == 1
        assert data["parsed_count"] == 0

    def test_dump_json(self, tmp_path):
        path = tmp_path / "diag.json"
        self._record().dump_json(str(path))
        assert json.loads(path.read_text())["line_count"] == 1

    def test_summary(self):
        summary = dump_query_summary(self._record())
        assert summary.startswith("ip neigh (4ms) | parse-error | 0/1 parsed")
        assert "no link layer address found" in summary

    def test_detail(self):
        detail = dump_query_detail(self._record())
        assert "status: parse-error (exit 0)" in detail
        assert "    192.168.0.2 dev br-lan used" in detail
