from __future__ import annotations

import logging

import pytest

from encoder_stage.core import Context, Options, build_context


@pytest.fixture
def logger() -> logging.Logger:
    logger = logging.getLogger("encoder_stage_tests")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def make_ctx(logger):
    def _make(*, dry_run: bool = False, backend: str = "native") -> Context:
        return build_context(options=Options(dry_run=dry_run, backend=backend), logger=logger)

    return _make
