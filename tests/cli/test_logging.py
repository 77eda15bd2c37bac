from __future__ import annotations

import importlib
import logging

import pytest


def test_normalize_logging_config_defaults() -> None:
    mod = importlib.import_module("binomial_lattice.cli.logging")
    normalized = mod._normalize_logging_config(None)
    assert normalized == mod.DEFAULT_LOGGING


def test_normalize_logging_config_overrides() -> None:
    mod = importlib.import_module("binomial_lattice.cli.logging")
    cfg = {
        "level": "DEBUG",
        "format": "%(message)s",
        "file": "log.txt",
        "color": False,
        "module_levels": {"binomial_lattice.engines": "DEBUG"},
    }
    normalized = mod._normalize_logging_config(cfg)
    assert normalized["level"] == "DEBUG"
    assert normalized["format"] == "%(message)s"
    assert normalized["file"] == "log.txt"
    assert normalized["color"] is False
    assert normalized["module_levels"] == {"binomial_lattice.engines": "DEBUG"}


def test_normalize_logging_config_ignores_unknown_and_none() -> None:
    mod = importlib.import_module("binomial_lattice.cli.logging")
    normalized = mod._normalize_logging_config({"level": None, "colour": False})
    assert normalized == mod.DEFAULT_LOGGING


def test_setup_logging_from_config_uses_normalized(monkeypatch) -> None:
    mod = importlib.import_module("binomial_lattice.cli.logging")

    captured: dict[str, object] = {}

    def _setup_logging(level, *, fmt_console, log_file, module_levels, colored):
        captured["level"] = level
        captured["fmt_console"] = fmt_console
        captured["log_file"] = log_file
        captured["module_levels"] = module_levels
        captured["colored"] = colored

    monkeypatch.setattr(mod, "setup_logging", _setup_logging)

    mod.setup_logging_from_config({"level": "WARNING", "color": False})

    assert captured == {
        "level": "WARNING",
        "fmt_console": mod.DEFAULT_LOGGING["format"],
        "log_file": None,
        "module_levels": None,
        "colored": False,
    }


@pytest.mark.parametrize(
    ("level", "expected"),
    [("info", logging.INFO), ("WARN", logging.WARNING), ("10", 10), (30, 30)],
)
def test_coerce_level(level, expected) -> None:
    mod = importlib.import_module("binomial_lattice.utils.logging_config")
    assert mod.coerce_level(level) == expected


def test_coerce_level_rejects_unknown() -> None:
    mod = importlib.import_module("binomial_lattice.utils.logging_config")
    with pytest.raises(ValueError, match="Unknown logging level"):
        mod.coerce_level("loud")


def test_setup_logging_applies_module_levels(tmp_path) -> None:
    mod = importlib.import_module("binomial_lattice.utils.logging_config")
    log_file = tmp_path / "logs" / "bench.log"
    engines = logging.getLogger("binomial_lattice.engines")
    previous = engines.level
    try:
        mod.setup_logging(
            "WARNING",
            log_file=log_file,
            module_levels={"binomial_lattice.engines": "DEBUG"},
        )
        assert logging.getLogger().level == logging.WARNING
        assert engines.level == logging.DEBUG
        assert log_file.parent.exists()
    finally:
        engines.setLevel(previous)
        for handler in logging.getLogger().handlers[:]:
            handler.close()
            logging.getLogger().removeHandler(handler)


def test_setup_logging_file_handler_keeps_full_logger_name(tmp_path) -> None:
    mod = importlib.import_module("binomial_lattice.utils.logging_config")
    log_file = tmp_path / "bench.log"
    try:
        mod.setup_logging(
            "INFO", fmt_console="%(shortname)s %(message)s", log_file=log_file
        )
        logger = logging.getLogger("binomial_lattice.engines.lattice_engine")
        logger.warning("collapsed")
        for handler in logging.getLogger().handlers:
            handler.flush()
        text = log_file.read_text(encoding="utf-8")
        assert "binomial_lattice.engines.lattice_engine - collapsed" in text
    finally:
        for handler in logging.getLogger().handlers[:]:
            handler.close()
            logging.getLogger().removeHandler(handler)
