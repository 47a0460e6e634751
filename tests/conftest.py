"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import pytest

from rookery.core.board import Board


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--runslow",
        action="store_true",
        default=False,
        help="run deep perft tests marked as slow",
    )


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    if config.getoption("--runslow"):
        return
    skip_slow = pytest.mark.skip(reason="needs --runslow")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def board() -> Board:
    """A fresh board in the standard starting position."""
    return Board.initial()
