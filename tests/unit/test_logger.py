import logging
from collections.abc import Callable

import pytest

from task_resolver.logging.logger import Log, _ContextFormatter


def _record(message: str, context: dict[str, object] | None = None) -> logging.LogRecord:
    record = logging.LogRecord("task_resolver", logging.INFO, __file__, 1, message, None, None)
    if context is not None:
        record.context = context
    return record


class TestContextFormatter:
    def test_appends_context_pairs(self) -> None:
        line = _ContextFormatter("%(message)s").format(
            _record("done", {"request_id": "abc", "kind": "weekday_count"})
        )
        assert line == "done | request_id=abc kind=weekday_count"

    def test_plain_message_without_context(self) -> None:
        assert _ContextFormatter("%(message)s").format(_record("done", {})) == "done"
        assert _ContextFormatter("%(message)s").format(_record("done")) == "done"


class TestLog:
    def test_passes_context_to_record(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="task_resolver"):
            Log.info("Classified", request_id="r1")
        record = caplog.records[-1]
        assert record.getMessage() == "Classified"
        assert record.context == {"request_id": "r1"}

    def test_levels(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="task_resolver"):
            Log.debug("d")
            Log.warning("w")
            Log.error("e")
        assert [r.levelname for r in caplog.records[-3:]] == ["DEBUG", "WARNING", "ERROR"]

    @pytest.mark.parametrize(
        ("method", "level"),
        [(Log.debug, "DEBUG"), (Log.info, "INFO"), (Log.warning, "WARNING"), (Log.error, "ERROR")],
    )
    def test_each_level_carries_context(
        self, caplog: pytest.LogCaptureFixture, method: Callable[..., None], level: str
    ) -> None:
        with caplog.at_level(logging.DEBUG, logger="task_resolver"):
            method("step", request_id="r2")
        record = caplog.records[-1]
        assert record.levelname == level
        assert record.context == {"request_id": "r2"}

    def test_configure_adds_single_handler(self) -> None:
        logger = logging.getLogger("task_resolver")
        previous = list(logger.handlers)
        previous_level = logger.level
        logger.handlers.clear()
        try:
            Log.configure("debug")
            Log.configure("info")
            assert len(logger.handlers) == 1
            assert isinstance(logger.handlers[0].formatter, _ContextFormatter)
            assert logger.level == logging.INFO
        finally:
            logger.handlers[:] = previous
            logger.setLevel(previous_level)
