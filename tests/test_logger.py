"""
Tests for the logger runtime.

Covers:
- LogRecord and LogLevel
- Formatters (compact, detailed, JSON)
- Handlers (stream, file, buffer) and channel filters
- Processors (priority, exception, URL)
- Logger singleton, chains, emission gate, handler failure
- LoggerAware capability
"""

import io
import json
import os
import threading
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from logweave.debugger.renderer import ExceptionRenderer
from logweave.logger.aware import LoggerAware, LoggerAwareMixin
from logweave.logger.core import Logger
from logweave.logger.formatters import (
    CompactFormatter,
    DetailedFormatter,
    JsonFormatter,
    get_formatter,
)
from logweave.logger.handlers import BufferHandler, FileHandler, StreamHandler
from logweave.logger.processors import ExceptionProcessor, PriorityProcessor, UrlProcessor
from logweave.logger.records import LogLevel, LogRecord, level_name, resolve_level


@pytest.fixture(autouse=True)
def reset_logger():
    """Reset singleton before and after each test."""
    Logger.reset()
    yield
    Logger.reset()


def _raise(exc):
    try:
        raise exc
    except Exception as caught:
        return caught


# ═══════════════════════════════════════════════════════════════════
#  LogLevel
# ═══════════════════════════════════════════════════════════════════

class TestLogLevel:
    def test_standard_levels_ordered(self):
        assert LogLevel.TRACE < LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARNING
        assert LogLevel.WARNING < LogLevel.ERROR < LogLevel.CRITICAL

    def test_custom_levels_interleaved(self):
        assert LogLevel.DEBUG < LogLevel.VERBOSE < LogLevel.INFO
        assert LogLevel.INFO < LogLevel.NOTICE < LogLevel.WARNING
        assert LogLevel.ERROR < LogLevel.ALERT < LogLevel.CRITICAL

    def test_python_compatible_values(self):
        assert LogLevel.DEBUG == 10
        assert LogLevel.INFO == 20
        assert LogLevel.WARNING == 30
        assert LogLevel.ERROR == 40
        assert LogLevel.CRITICAL == 50

    def test_from_name_case_insensitive(self):
        assert LogLevel.from_name("debug") == LogLevel.DEBUG
        assert LogLevel.from_name("Info") == LogLevel.INFO

    def test_from_name_invalid(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            LogLevel.from_name("loud")

    def test_from_value(self):
        assert LogLevel.from_value(50) == LogLevel.CRITICAL
        assert LogLevel.from_value("warning") == LogLevel.WARNING
        with pytest.raises(ValueError):
            LogLevel.from_value(33)

    def test_level_name_fallback(self):
        assert level_name(20) == "INFO"
        assert level_name(999) == "999"

    def test_resolve_level(self):
        assert resolve_level("error") == 40
        assert resolve_level(33) == 33
        with pytest.raises(TypeError):
            resolve_level(True)
        with pytest.raises(TypeError):
            resolve_level(1.5)


# ═══════════════════════════════════════════════════════════════════
#  LogRecord
# ═══════════════════════════════════════════════════════════════════

class TestLogRecord:
    def test_create_basic(self):
        record = LogRecord.create(LogLevel.INFO, "order placed")
        assert record.level == 20
        assert record.level_name == "INFO"
        assert record.channel == "app"
        assert record.tags == frozenset()
        assert record.extra == {}

    def test_create_with_context(self):
        record = LogRecord.create(LogLevel.DEBUG, "cache", channel="shop", hits=3)
        assert record.channel == "shop"
        assert record.context == {"hits": 3}

    def test_immutable(self):
        record = LogRecord.create(LogLevel.INFO, "test")
        with pytest.raises(AttributeError):
            record.message = "changed"

    def test_with_extra_copies(self):
        record = LogRecord.create(LogLevel.INFO, "test")
        changed = record.with_extra(request_id="r1")
        assert changed.extra == {"request_id": "r1"}
        assert record.extra == {}


# ═══════════════════════════════════════════════════════════════════
#  Formatters
# ═══════════════════════════════════════════════════════════════════

class TestFormatters:
    def test_compact(self):
        ts = datetime(2026, 2, 12, 14, 32, 5, tzinfo=timezone.utc)
        record = LogRecord(timestamp=ts, level=20, level_name="INFO", message="served", channel="web")
        assert CompactFormatter().format(record) == "14:32:05 [    INFO] web: served"

    def test_detailed_includes_context_and_extra(self):
        record = LogRecord.create(LogLevel.INFO, "served", tags={"http"}, status=200)
        record = record.with_extra(exception_file="exception--x.html")
        result = DetailedFormatter().format(record)
        assert "[http]" in result
        assert "status=200" in result
        assert "exception_file=exception--x.html" in result

    def test_detailed_no_tags(self):
        result = DetailedFormatter().format(LogRecord.create(LogLevel.INFO, "plain"))
        assert "[-]" in result

    def test_json(self):
        record = LogRecord.create(LogLevel.ERROR, "boom", channel="payments", error=ValueError("x"))
        parsed = json.loads(JsonFormatter().format(record.with_extra(exception_url="http://e/1")))
        assert parsed["channel"] == "payments"
        assert parsed["context"]["error"] == "ValueError: x"
        assert parsed["extra"]["exception_url"] == "http://e/1"

    def test_get_formatter_by_name(self):
        assert isinstance(get_formatter("json"), JsonFormatter)
        assert get_formatter(None) is None
        with pytest.raises(ValueError, match="Unknown formatter"):
            get_formatter("xml")


# ═══════════════════════════════════════════════════════════════════
#  Handlers
# ═══════════════════════════════════════════════════════════════════

class TestChannelFilter:
    def test_all_channels_by_default(self):
        handler = BufferHandler()
        assert handler.handles(LogRecord.create(LogLevel.INFO, "x", channel="payments"))

    def test_include(self):
        handler = BufferHandler(channels=["payments"])
        assert handler.handles(LogRecord.create(LogLevel.INFO, "x", channel="payments"))
        assert not handler.handles(LogRecord.create(LogLevel.INFO, "x", channel="app"))

    def test_exclude(self):
        handler = BufferHandler(channels=["!access"])
        assert not handler.handles(LogRecord.create(LogLevel.INFO, "x", channel="access"))
        assert handler.handles(LogRecord.create(LogLevel.INFO, "x", channel="app"))

    def test_single_string(self):
        assert BufferHandler(channels="payments").include_channels == {"payments"}

    def test_level_gate_still_applies(self):
        handler = BufferHandler(min_level="error", channels=["payments"])
        assert not handler.handles(LogRecord.create(LogLevel.INFO, "x", channel="payments"))

    def test_logger_routes_channels(self):
        log = Logger("app")
        payments = BufferHandler(name="payments", channels=["payments"])
        rest = BufferHandler(name="rest", channels=["!payments"])
        log.push_handler(payments)
        log.push_handler(rest)
        log.push_processor(PriorityProcessor())

        log.info("card declined", priority="payments")
        log.info("cache warmed")

        assert [r.message for r in payments.get_recent()] == ["card declined"]
        assert [r.message for r in rest.get_recent()] == ["cache warmed"]


class TestStreamHandler:
    def test_emit_to_stdout(self, capsys):
        StreamHandler(color=False).emit(LogRecord.create(LogLevel.INFO, "hello"))
        assert "hello" in capsys.readouterr().out

    def test_error_to_stderr(self, capsys):
        StreamHandler(color=False).emit(LogRecord.create(LogLevel.ERROR, "bad"))
        assert "bad" in capsys.readouterr().err

    def test_errors_kept_on_stdout(self, capsys):
        StreamHandler(color=False, split_errors=False).emit(LogRecord.create(LogLevel.ERROR, "bad"))
        assert "bad" in capsys.readouterr().out

    def test_color_codes_applied(self):
        handler = StreamHandler(color=True)
        with patch("sys.stdout", new_callable=io.StringIO) as mock:
            handler.emit(LogRecord.create(LogLevel.WARNING, "caution"))
            assert "\033[33m" in mock.getvalue()

    @pytest.mark.parametrize("level, style", [
        (LogLevel.CRITICAL, "\033[1;91m"),
        (LogLevel.ALERT, "\033[91m"),
        (LogLevel.WARNING + 5, "\033[33m"),
        (LogLevel.INFO, ""),
        (LogLevel.VERBOSE, "\033[36m"),
        (LogLevel.TRACE, "\033[90m"),
    ])
    def test_style_bands(self, level, style):
        assert StreamHandler().style_for(level) == style

    def test_exception_page_line(self, capsys):
        record = LogRecord.create(LogLevel.INFO, "boom").with_extra(
            exception_file="exception--x.html",
            exception_url="https://errors.example.com/exception--x.html",
        )
        StreamHandler(color=False).emit(record)
        lines = capsys.readouterr().out.splitlines()
        assert lines[1] == "    ↳ https://errors.example.com/exception--x.html"

    def test_exception_file_without_url(self, capsys):
        record = LogRecord.create(LogLevel.INFO, "boom").with_extra(exception_file="exception--x.html")
        StreamHandler(color=False).emit(record)
        assert capsys.readouterr().out.splitlines()[1].endswith("exception--x.html")

    def test_min_level_by_name(self):
        handler = StreamHandler(min_level="warning")
        assert not handler.handles(LogRecord.create(LogLevel.INFO, "x"))
        assert handler.handles(LogRecord.create(LogLevel.ERROR, "x"))


class TestFileHandler:
    def test_writes_to_file(self, tmp_path):
        path = tmp_path / "app.log"
        handler = FileHandler(path=path, rotation="none")
        handler.emit(LogRecord.create(LogLevel.INFO, "file test"))
        handler.close()
        assert "file test" in path.read_text()

    def test_daily_rotation(self, tmp_path):
        handler = FileHandler(path=tmp_path / "app.log", rotation="daily")
        for day in (15, 16):
            ts = datetime(2026, 1, day, 10, 0, 0, tzinfo=timezone.utc)
            handler.emit(LogRecord(timestamp=ts, level=20, level_name="INFO", message=f"day{day}"))
        assert handler.open_paths == [tmp_path / "app_2026-01-16.log"]
        handler.close()
        assert len(list(tmp_path.glob("app_*.log"))) == 2

    def test_file_per_channel(self, tmp_path):
        handler = FileHandler(path=tmp_path / "{channel}.log", rotation="none")
        assert handler.per_channel
        handler.emit(LogRecord.create(LogLevel.INFO, "declined", channel="payments"))
        handler.emit(LogRecord.create(LogLevel.INFO, "served", channel="app"))
        handler.emit(LogRecord.create(LogLevel.INFO, "refunded", channel="payments"))
        handler.close()
        assert (tmp_path / "payments.log").read_text().count("\n") == 2
        assert "served" in (tmp_path / "app.log").read_text()

    def test_channel_sanitized_in_path(self, tmp_path):
        handler = FileHandler(path=tmp_path / "{channel}.log", rotation="none")
        record = LogRecord.create(LogLevel.INFO, "x", channel="../escape")
        assert handler.path_for(record).parent == tmp_path

    def test_cleanup_keeps_open_files(self, tmp_path):
        handler = FileHandler(path=tmp_path / "app.log", rotation="daily", retention_days=0)
        stale = tmp_path / "app_2020-01-01.log"
        stale.write_text("old")
        os.utime(stale, (0, 0))
        handler.emit(LogRecord.create(LogLevel.INFO, "today"))
        removed = handler.cleanup_old_files()
        handler.close()
        assert removed == 1
        assert not stale.exists()
        assert len(list(tmp_path.glob("app_*.log"))) == 1

    def test_creates_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "app.log"
        handler = FileHandler(path=path, rotation="none")
        handler.emit(LogRecord.create(LogLevel.INFO, "nested"))
        handler.close()
        assert path.exists()

    def test_unknown_rotation(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown rotation"):
            FileHandler(path=tmp_path / "x.log", rotation="hourly")


class TestBufferHandler:
    def test_ring_buffer(self):
        handler = BufferHandler(capacity=5)
        for i in range(10):
            handler.emit(LogRecord.create(LogLevel.INFO, f"msg {i}"))
        assert handler.count == 5
        assert handler.get_recent(n=1)[0].message == "msg 9"

    def test_filter_by_tags(self):
        handler = BufferHandler()
        handler.emit(LogRecord.create(LogLevel.INFO, "a", tags={"http"}))
        handler.emit(LogRecord.create(LogLevel.INFO, "b", tags={"db"}))
        assert [r.message for r in handler.get_recent(tags={"http"})] == ["a"]

    def test_filter_by_channel(self):
        handler = BufferHandler()
        handler.emit(LogRecord.create(LogLevel.INFO, "a", channel="payments"))
        handler.emit(LogRecord.create(LogLevel.INFO, "b"))
        assert [r.message for r in handler.get_recent(channel="payments")] == ["a"]

    def test_channel_counts(self):
        handler = BufferHandler()
        for channel in ("app", "payments", "app"):
            handler.emit(LogRecord.create(LogLevel.INFO, "x", channel=channel))
        assert handler.channels() == {"app": 2, "payments": 1}

    def test_format_all(self):
        handler = BufferHandler()
        handler.emit(LogRecord.create(LogLevel.INFO, "served", channel="shop"))
        assert handler.format_all()[0].endswith("shop: served")

    def test_clear(self):
        handler = BufferHandler()
        handler.emit(LogRecord.create(LogLevel.INFO, "a"))
        handler.clear()
        assert handler.count == 0


# ═══════════════════════════════════════════════════════════════════
#  Processors
# ═══════════════════════════════════════════════════════════════════

class TestPriorityProcessor:
    def test_custom_priority_becomes_channel(self):
        record = LogRecord.create(LogLevel.INFO, "declined", priority="payments")
        processed = PriorityProcessor()(record)
        assert processed.channel == "payments"
        assert "priority" not in processed.context

    def test_standard_priority_keeps_channel(self):
        record = LogRecord.create(LogLevel.ERROR, "boom", channel="shop", priority="error")
        processed = PriorityProcessor()(record)
        assert processed.channel == "shop"
        assert processed.context == {}

    def test_explicit_channel_wins(self):
        record = LogRecord.create(LogLevel.INFO, "x").with_changes(
            context={"channel": "audit", "priority": "payments", "hint": 1}
        )
        processed = PriorityProcessor()(record)
        assert processed.channel == "audit"
        assert processed.context == {"hint": 1}

    def test_untouched_without_hints(self):
        record = LogRecord.create(LogLevel.INFO, "x", user=1)
        assert PriorityProcessor()(record) is record


class TestExceptionProcessors:
    def test_exception_processor_renders_page(self, tmp_path):
        renderer = ExceptionRenderer(tmp_path)
        exc = _raise(KeyError("sku"))
        record = LogRecord.create(LogLevel.CRITICAL, "boom", exception=exc)
        processed = ExceptionProcessor(renderer)(record)
        filename = processed.extra["exception_file"]
        assert filename.startswith("exception--")
        assert (tmp_path / filename).exists()

    def test_url_processor_matches_rendered_page(self, tmp_path):
        renderer = ExceptionRenderer(tmp_path)
        exc = _raise(RuntimeError("down"))
        record = LogRecord.create(LogLevel.CRITICAL, "boom", exception=exc)

        with_url = UrlProcessor("https://errors.example.com/", renderer)(record)
        rendered = ExceptionProcessor(renderer)(with_url)
        assert rendered.extra["exception_url"] == (
            "https://errors.example.com/" + rendered.extra["exception_file"]
        )

    def test_ignore_records_without_exception(self, tmp_path):
        renderer = ExceptionRenderer(tmp_path)
        record = LogRecord.create(LogLevel.INFO, "fine", exception="not an exception")
        assert ExceptionProcessor(renderer)(record) is record
        assert UrlProcessor("http://x", renderer)(record) is record
        assert list(tmp_path.iterdir()) == []


# ═══════════════════════════════════════════════════════════════════
#  Logger
# ═══════════════════════════════════════════════════════════════════

class TestLoggerSingleton:
    def test_singleton_identity(self):
        assert Logger.instance() is Logger.instance()
        assert Logger.instance().name == "logweave"

    def test_reset_creates_new_instance(self):
        a = Logger.instance()
        Logger.reset()
        assert Logger.instance() is not a

    def test_thread_safe_singleton(self):
        instances = []
        threads = [threading.Thread(target=lambda: instances.append(Logger.instance())) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert all(inst is instances[0] for inst in instances)


class TestLoggerChains:
    def test_silent_without_handlers(self):
        log = Logger("app")
        calls = []
        log.push_processor(lambda r: calls.append(r) or r)
        log.critical("nobody listens")
        assert calls == []

    def test_level_gate(self):
        log = Logger("app", level="warning")
        buffer = BufferHandler()
        log.push_handler(buffer)
        log.info("dropped")
        log.error("kept")
        assert [r.message for r in buffer.get_recent()] == ["kept"]

    def test_processors_run_in_push_order(self):
        log = Logger("app")
        buffer = BufferHandler()
        log.push_handler(buffer)
        log.push_processor(lambda r: r.with_extra(trail=r.extra.get("trail", "") + "a"))
        log.push_processor(lambda r: r.with_extra(trail=r.extra.get("trail", "") + "b"))
        log.info("x")
        assert buffer.get_recent()[0].extra["trail"] == "ab"

    def test_handlers_receive_in_push_order(self):
        log = Logger("app")
        seen = []

        class Recording(BufferHandler):
            def emit(self, record):
                seen.append(self.name)

        log.push_handler(Recording(name="first"))
        log.push_handler(Recording(name="second"))
        log.info("x")
        assert seen == ["first", "second"]

    def test_handler_failure_does_not_crash(self):
        log = Logger("app")

        class Broken(BufferHandler):
            def emit(self, record):
                raise RuntimeError("handler exploded")

        buffer = BufferHandler(name="after")
        log.push_handler(Broken(name="broken"))
        log.push_handler(buffer)
        log.info("still delivered")
        assert buffer.count == 1

    def test_push_handler_type_checked(self):
        with pytest.raises(TypeError, match="Expected Handler"):
            Logger().push_handler(object())

    def test_push_processor_must_be_callable(self):
        with pytest.raises(TypeError, match="callable"):
            Logger().push_processor("nope")

    def test_remove_handler(self):
        log = Logger()
        log.push_handler(BufferHandler(name="b"))
        assert log.remove_handler("b") is not None
        assert log.remove_handler("b") is None
        assert log.handlers == ()

    def test_channel_is_logger_name(self):
        log = Logger("shop")
        buffer = BufferHandler()
        log.push_handler(buffer)
        log.notice("x")
        assert buffer.get_recent()[0].channel == "shop"

    def test_all_levels_emit(self):
        log = Logger(level=LogLevel.TRACE)
        buffer = BufferHandler(min_level=1)
        log.push_handler(buffer)
        for method in ("trace", "debug", "verbose", "info", "notice", "warning", "error", "alert", "critical"):
            getattr(log, method)(method)
        assert [r.level_name for r in buffer.get_recent()] == [
            "TRACE", "DEBUG", "VERBOSE", "INFO", "NOTICE", "WARNING", "ERROR", "ALERT", "CRITICAL",
        ]

    def test_status(self):
        log = Logger("shop")
        log.push_handler(BufferHandler(name="mem"))
        log.push_processor(PriorityProcessor())
        status = log.status()
        assert status["name"] == "shop"
        assert status["handlers"][0]["name"] == "mem"
        assert status["processors"] == ["PriorityProcessor"]


# ═══════════════════════════════════════════════════════════════════
#  LoggerAware
# ═══════════════════════════════════════════════════════════════════

class TestLoggerAware:
    def test_mixin_stores_logger(self):
        class Mailer(LoggerAwareMixin):
            pass

        mailer = Mailer()
        log = Logger("shop")
        mailer.set_logger(log)
        assert mailer.logger is log
        assert isinstance(mailer, LoggerAware)

    def test_abstract_interface(self):
        with pytest.raises(TypeError):
            LoggerAware()
