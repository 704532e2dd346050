from __future__ import annotations

import logging
from pathlib import Path

import pytest

from idlwrap.logging import PHASES, configure_logging, get_logger


def test_get_logger_rejects_unknown_phase() -> None:
    assert get_logger().name == "idlwrap"
    assert get_logger("model").name == "idlwrap.model"
    with pytest.raises(ValueError, match="Unknown logging phase 'parser'"):
        get_logger("parser")


def test_debug_phase_only_affects_selected_phase(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(debug_phases=["model"])

    get_logger("model").debug("skipped enum Color")
    get_logger("sources").debug("found 3 files")
    get_logger("emit").info("wrote 2 modules")

    err = capsys.readouterr().err
    assert "[idlwrap:model] DEBUG skipped enum Color" in err
    assert "found 3 files" not in err
    assert "[idlwrap:emit] INFO wrote 2 modules" in err


def test_verbose_enables_every_phase(capsys: pytest.CaptureFixture[str]) -> None:
    logger = configure_logging(verbose=True)

    assert logger.level == logging.DEBUG
    assert all(get_logger(phase).level == logging.DEBUG for phase in PHASES)
    get_logger("sources").debug("found 3 files")
    assert "[idlwrap:sources] DEBUG found 3 files" in capsys.readouterr().err


def test_reconfiguring_resets_phase_levels_and_handlers(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(debug_phases=["model"])
    logger = configure_logging()

    assert len(logger.handlers) == 1
    assert get_logger("model").level == logging.NOTSET
    get_logger("model").debug("hidden")
    get_logger("model").info("shown")

    err = capsys.readouterr().err
    assert "hidden" not in err
    assert "[idlwrap] INFO shown" in err


def test_configure_logging_writes_file_sink(tmp_path: Path) -> None:
    log_file = tmp_path / "build.log"
    logger = configure_logging(log_file=log_file)

    get_logger("emit").info("wrote Foo.py")
    for handler in logger.handlers:
        handler.flush()

    assert "INFO idlwrap.emit: wrote Foo.py" in log_file.read_text(encoding="utf-8")


def test_configure_logging_rejects_unknown_phase() -> None:
    with pytest.raises(ValueError, match="parser"):
        configure_logging(debug_phases=["parser"])
