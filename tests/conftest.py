"""Shared graph fixtures."""

import pytest
from pylayout.graph import Graph


@pytest.fixture
def cycle4():
    """4-node cycle 0-1-2-3-0."""
    return Graph([0, 1, 2, 3], [(0, 1), (1, 2), (2, 3), (3, 0)])


@pytest.fixture
def path3():
    """3-node path 0-1-2."""
    return Graph([0, 1, 2], [(0, 1), (1, 2)])


@pytest.fixture
def star():
    """Star with hub 'h' and five leaves."""
    leaves = ['a', 'b', 'c', 'd', 'e']
    return Graph(['h'] + leaves, [('h', v) for v in leaves])
