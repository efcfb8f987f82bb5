"""
Test credential redaction in logs.

Private keys, API secrets and passphrases must never reach log output,
including exception tracebacks.
"""

import logging
import logging.config
from io import StringIO

import pytest

from ..logging_config import build_logging_config, get_logger, setup_logging_from_settings
from ..utils.redaction import CredentialRedactionFilter
from .fakes import TEST_ADDRESS, TEST_API_SECRET, TEST_PRIVATE_KEY, BIG_TOKEN_ID


@pytest.fixture
def captured():
    """Logger with a redacting handler writing to a buffer."""
    logger = logging.getLogger("test_redaction")
    logger.setLevel(logging.DEBUG)
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.addFilter(CredentialRedactionFilter())
    logger.addHandler(handler)
    yield logger, stream
    logger.removeHandler(handler)


class TestCredentialRedactionFilter:
    """Pattern coverage."""

    def test_private_key_redacted(self, captured):
        logger, stream = captured
        logger.info(f"Processing wallet with key: {TEST_PRIVATE_KEY}")

        output = stream.getvalue()
        assert TEST_PRIVATE_KEY not in output
        assert "0x[REDACTED]" in output

    def test_secret_assignment_redacted(self, captured):
        logger, stream = captured
        logger.info(f"secret={TEST_API_SECRET} passphrase='abcdefghijklmnopqrstuvwxyz'")

        output = stream.getvalue()
        assert TEST_API_SECRET not in output
        assert "abcdefghijklmnopqrstuvwxyz" not in output
        assert "secret=[REDACTED]" in output

    def test_bare_base64_secret_redacted(self, captured):
        logger, stream = captured
        logger.info(f"credentials {TEST_API_SECRET}")

        output = stream.getvalue()
        assert TEST_API_SECRET not in output
        assert TEST_API_SECRET[:8] + "...[REDACTED]" in output

    def test_args_redacted(self, captured):
        logger, stream = captured
        logger.info("key %s", TEST_PRIVATE_KEY)
        assert TEST_PRIVATE_KEY not in stream.getvalue()

    def test_public_identifiers_kept(self, captured):
        logger, stream = captured
        logger.info(f"Built order for {TEST_ADDRESS} token={BIG_TOKEN_ID}")

        output = stream.getvalue()
        assert TEST_ADDRESS in output
        assert BIG_TOKEN_ID in output

    def test_exception_text_redacted(self, captured):
        logger, stream = captured
        try:
            raise ValueError(f"bad key {TEST_PRIVATE_KEY}")
        except ValueError:
            logger.exception("failure")

        output = stream.getvalue()
        assert "failure" in output
        assert TEST_PRIVATE_KEY not in output


class TestLoggingConfig:
    """dictConfig construction."""

    def test_every_handler_redacts(self, tmp_path):
        config = build_logging_config(level="debug", log_file=str(tmp_path / "orders.log"))

        assert set(config["handlers"]) == {"console", "file", "error_file"}
        for handler in config["handlers"].values():
            assert handler["filters"] == ["redact_credentials"]
        assert config["handlers"]["error_file"]["filename"].endswith("orders_errors.log")
        assert config["loggers"]["clob_orders"]["level"] == "DEBUG"
        assert config["loggers"]["clob_orders"]["handlers"] == ["console", "file", "error_file"]

    def test_json_format(self):
        config = build_logging_config(json_format=True)
        assert config["handlers"]["console"]["formatter"] == "json"
        assert "file" not in config["handlers"]

    def test_defaults_not_mutated(self):
        build_logging_config(level="ERROR", log_file="x.log", json_format=True)
        config = build_logging_config()
        assert config["loggers"]["clob_orders"]["level"] == "INFO"
        assert config["handlers"]["console"]["formatter"] == "standard"

    def test_get_logger_namespace(self):
        assert get_logger("orders").name == "clob_orders.orders"

    def test_setup_from_settings(self, settings, monkeypatch):
        applied = []
        monkeypatch.setattr(logging.config, "dictConfig", applied.append)

        setup_logging_from_settings(settings.model_copy(update={"log_level": "WARNING", "log_json": True}))

        assert applied[0]["loggers"]["clob_orders"]["level"] == "WARNING"
        assert applied[0]["handlers"]["console"]["formatter"] == "json"
