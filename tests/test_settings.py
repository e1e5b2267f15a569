# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import logging

import pytest

from pydantic import ValidationError

from fastresource.config import DEFAULT_REDACTED_KEYS, BaseSettings, get_settings, init_settings
from fastresource.dependencies import reset_services
from fastresource.logger import LogFormat, LogOutput, get_format, setup_logging


def test_defaults():
    settings = BaseSettings()

    assert settings.relation_resolve_limit == 15
    assert settings.attachment_per_page == 25
    assert settings.attachment_max_per_page == 100
    assert settings.redacted_keys == DEFAULT_REDACTED_KEYS
    assert settings.database_isolation_level is None


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ATTACHMENT_PER_PAGE", "10")
    monkeypatch.setenv("LOG_FORMAT", "key_value")

    settings = BaseSettings()

    assert settings.attachment_per_page == 10
    assert settings.log_format == LogFormat.KEY_VALUE


def test_page_sizes_must_be_positive():
    with pytest.raises(ValidationError):
        BaseSettings(attachment_per_page=0)


def test_init_settings_registers_once(tmp_path):
    reset_services()
    env_file = tmp_path / ".env"
    env_file.write_text("RELATION_RESOLVE_LIMIT=5\n", encoding="utf-8")

    settings = init_settings(str(env_file))

    assert settings.relation_resolve_limit == 5
    assert get_settings() is settings
    assert init_settings() is settings


def test_custom_log_format_is_used_as_is():
    assert get_format("%(message)s") == "%(message)s"
    assert "%(levelname)s" in get_format(LogFormat.TEXT)


def test_setup_logging_replaces_its_handlers(tmp_path):
    settings = BaseSettings(log_output=LogOutput.BOTH, log_file=str(tmp_path / "logs" / "app.log"))

    logger = setup_logging(settings)
    logger = setup_logging(settings)

    try:
        handlers = [handler for handler in logger.handlers if getattr(handler, "_fastresource", False)]

        assert len(handlers) == 2
        assert logger.level == logging.INFO

        logging.getLogger("fastresource.persist").info("written")

        for handler in handlers:
            handler.flush()

        assert "written" in (tmp_path / "logs" / "app.log").read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            if getattr(handler, "_fastresource", False):
                logger.removeHandler(handler)
                handler.close()

        logger.setLevel(logging.NOTSET)
