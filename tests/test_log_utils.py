import logging

from rich.logging import RichHandler

from asdf_vals import log_utils


class TestLogUtils:
    """Test suite for log_utils module."""

    def setup_method(self):
        """Reset logger state before each test."""
        log_utils._initialize_logger()

    def teardown_method(self):
        log_utils._initialize_logger()

    def test_logger_initialization(self):
        """Test that logger is properly initialized."""
        assert log_utils.logger.name == "asdf-vals"
        assert not log_utils.logger.propagate
        assert len(log_utils.logger.handlers) == 1
        assert isinstance(log_utils.logger.handlers[0], RichHandler)
        assert log_utils.logger.level == logging.INFO

    def test_reinitialization_does_not_duplicate_handlers(self):
        log_utils._initialize_logger()
        log_utils._initialize_logger()

        assert len(log_utils.logger.handlers) == 1

    def test_handler_writes_to_stderr_console(self):
        handler = log_utils.logger.handlers[0]

        assert handler.console is log_utils.console
        assert log_utils.console.stderr is True

    def test_set_log_level_valid(self):
        """Test setting valid log levels."""
        log_utils.set_log_level("DEBUG")
        assert log_utils.logger.level == logging.DEBUG
        assert log_utils.logger.handlers[0].level == logging.DEBUG

        log_utils.set_log_level("warning")
        assert log_utils.logger.level == logging.WARNING

    def test_set_log_level_invalid(self):
        """Test setting invalid log level."""
        original_level = log_utils.logger.level

        log_utils.set_log_level("LOUD")

        assert log_utils.logger.level == original_level

    def test_configure_logging(self):
        log_utils.configure_logging(True)
        assert log_utils.logger.level == logging.DEBUG

        log_utils.configure_logging(False)
        assert log_utils.logger.level == logging.INFO

    def test_messages_carry_plugin_prefix(self):
        record = logging.LogRecord(
            "asdf-vals", logging.INFO, __file__, 1, "hello", None, None
        )

        formatted = log_utils.logger.handlers[0].formatter.format(record)

        assert formatted == "asdf-vals: hello"
