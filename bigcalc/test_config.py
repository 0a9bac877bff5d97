# test_config.py

import logging
import os

import pytest
from pydantic import ValidationError

from bigcalc.config import LOG_FORMAT, Settings, configure_logging, load_settings


def test_defaults():
    settings = load_settings()
    assert settings.log_level == "WARNING"
    assert settings.show_tree is False
    assert settings.prompt == "> "
    assert settings.max_batch_size == 100


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("BIGCALC_LOG_LEVEL", "debug")
    monkeypatch.setenv("BIGCALC_SHOW_TREE", "1")
    monkeypatch.setenv("BIGCALC_PROMPT", "calc> ")
    monkeypatch.setenv("BIGCALC_MAX_BATCH_SIZE", "5")
    settings = load_settings()
    assert settings.log_level == "DEBUG"
    assert settings.show_tree is True
    assert settings.prompt == "calc> "
    assert settings.max_batch_size == 5


def test_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("BIGCALC_PROMPT=from-file> \n", encoding="utf-8")
    monkeypatch.setenv("BIGCALC_MAX_BATCH_SIZE", "7")
    settings = load_settings(str(env_file))
    # load_dotenv writes straight into os.environ.
    os.environ.pop("BIGCALC_PROMPT", None)
    assert settings.prompt.strip() == "from-file>"
    assert settings.max_batch_size == 7


@pytest.mark.parametrize("name,value", [
    ("BIGCALC_LOG_LEVEL", "loud"),
    ("BIGCALC_MAX_BATCH_SIZE", "0"),
    ("BIGCALC_MAX_BATCH_SIZE", "many"),
    ("BIGCALC_SHOW_TREE", "sometimes"),
])
def test_invalid_values_rejected(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        load_settings()


def test_configure_logging(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))
    configure_logging("info")
    assert calls == {"level": logging.INFO, "format": LOG_FORMAT}


def test_log_level_is_normalised():
    assert Settings(log_level=" info ").log_level == "INFO"
