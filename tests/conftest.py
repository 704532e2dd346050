from __future__ import annotations

import logging
from pathlib import Path

import pytest

from idlwrap.logging import PHASES
from tests._fixtures.idl_tree import IdlTreeBuilder


@pytest.fixture
def idl_tree(tmp_path: Path) -> IdlTreeBuilder:
    """Provide a reusable IDL tree builder rooted at the pytest tmp_path."""
    return IdlTreeBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_idlwrap_logger():
    """Drop handlers installed by CLI runs so later tests do not log to closed streams."""
    yield
    logger = logging.getLogger("idlwrap")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    for phase in PHASES:
        logging.getLogger(f"idlwrap.{phase}").setLevel(logging.NOTSET)
