import logging

from log_helper import LogHelper, VerboseLogger, VERBOSE_LEVEL, parse_level
from pathquery.options import CompilerOptions


def test_get_logger_is_verbose_logger():
    log = LogHelper.get_logger("pathquery.test.verbose")
    assert isinstance(log, VerboseLogger)
    assert log.isEnabledFor(VERBOSE_LEVEL)
    assert logging.getLevelName(VERBOSE_LEVEL) == "VERBOSE"


def test_parse_level():
    assert parse_level("debug") == logging.DEBUG
    assert parse_level("VERBOSE") == VERBOSE_LEVEL
    assert parse_level("15") == 15
    assert parse_level(None) == logging.WARNING
    assert parse_level("bogus", logging.INFO) == logging.INFO


def test_log_dir_routes_by_logger_name(tmp_path):
    LogHelper.shutdown()
    LogHelper.configure(log_dir=str(tmp_path), console=False)
    try:
        log = LogHelper.get_logger("pathquery.test.router")
        log.info("routed message")
        LogHelper.shutdown()
        text = (tmp_path / "pathquery.test.router.log").read_text(encoding="utf-8")
        assert "routed message" in text
    finally:
        LogHelper.shutdown()
        LogHelper.configure(log_dir=None, console=True)


def test_compiler_options_from_dict():
    opts = CompilerOptions.from_dict({"directed": True, "desc_keyword": "desc", "agent": "x"})
    assert opts == CompilerOptions(directed=True, desc_keyword="desc")
    assert CompilerOptions.from_dict(None) == CompilerOptions()
    assert opts.keyword("DESC") == "desc" and opts.keyword("ASC") == "ASC"
