import logging

import pytest

from logfactory.exceptions import InvalidLevelError
from logfactory.levels import LEVEL_NAMES, Level, from_stdlib, parse_level, to_stdlib


class TestLevel:
    def test_numeric_values(self) -> None:
        assert [int(level) for level in Level] == [100, 200, 250, 300, 400, 500, 550, 600]

    def test_method_names(self) -> None:
        assert LEVEL_NAMES == ("debug", "info", "notice", "warning", "error", "critical", "alert", "emergency")
        assert Level.EMERGENCY.method_name == "emergency"

    def test_ordering(self) -> None:
        assert Level.NOTICE > Level.INFO
        assert Level.ALERT < Level.EMERGENCY


class TestParseLevel:
    @pytest.mark.parametrize("value", [Level.ERROR, 400, "error", "ERROR", " Error "])
    def test_accepted_spellings(self, value) -> None:
        assert parse_level(value) is Level.ERROR

    @pytest.mark.parametrize("value", ["fatal", "", 0, 401, 3.0, None, True, [400]])
    def test_rejected_values(self, value) -> None:
        with pytest.raises(InvalidLevelError) as exc_info:
            parse_level(value)
        assert exc_info.value.level == value
        assert exc_info.value.code == "INVALID_LEVEL"

    def test_invalid_level_is_a_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_level("fatal")


class TestStdlibMapping:
    @pytest.mark.parametrize(
        "levelno, expected",
        [
            (logging.DEBUG, Level.DEBUG),
            (logging.INFO, Level.INFO),
            (logging.WARNING, Level.WARNING),
            (logging.ERROR, Level.ERROR),
            (logging.CRITICAL, Level.CRITICAL),
            (25, Level.INFO),
            (5, Level.DEBUG),
            (60, Level.CRITICAL),
        ],
    )
    def test_from_stdlib(self, levelno, expected) -> None:
        assert from_stdlib(levelno) is expected

    def test_to_stdlib(self) -> None:
        assert to_stdlib(Level.NOTICE) == logging.INFO
        assert to_stdlib(Level.EMERGENCY) == logging.CRITICAL
