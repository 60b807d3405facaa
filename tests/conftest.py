from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest

import sloplint.engine.tree_sitter as ts


@pytest.fixture(autouse=True)
def _reset_tree_sitter_state() -> Iterator[None]:
    yield
    # Tests may swap in fake parsers or grammar loaders.
    ts.reset()


@pytest.fixture(autouse=True)
def _drop_cli_log_handlers() -> Iterator[None]:
    root = logging.getLogger()
    level = root.level
    yield
    # `configure_logging` installs plain stream handlers bound to CliRunner streams.
    for handler in [h for h in root.handlers if type(h) is logging.StreamHandler]:
        root.removeHandler(handler)
    root.setLevel(level)
