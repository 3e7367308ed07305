"""Tests for the Kamada-Kawai layout."""

import pytest
import numpy as np
from pylayout.errors import GraphStructureError, InvalidParameterError
from pylayout.graph import Graph
from pylayout.kamada_kawai import kamada_kawai_layout


def distance(pos, u, v):
    return np.linalg.norm(np.asarray(pos[u]) - np.asarray(pos[v]))


class TestKamadaKawaiLayout:
    """Test kamada_kawai_layout function."""

    def test_empty_graph(self):
        """Test empty graph."""
        assert kamada_kawai_layout(Graph()) == {}

    def test_single_node(self):
        """Test that a single node sits at the centre."""
        pos = kamada_kawai_layout(Graph(['x']), center=(2, 3))
        np.testing.assert_array_equal(pos['x'], [2, 3])

    def test_node_list_requires_distances(self):
        """Test that a bare node list without distances is rejected."""
        with pytest.raises(GraphStructureError):
            kamada_kawai_layout([0, 1, 2])
        with pytest.raises(TypeError):
            kamada_kawai_layout([0, 1, 2])

    def test_node_list_with_distances(self):
        """Test explicit distances on a bare node list."""
        dist = {
            0: {1: 1, 2: 2},
            1: {0: 1, 2: 1},
            2: {0: 2, 1: 1},
        }
        pos = kamada_kawai_layout([0, 1, 2], dist=dist)
        assert distance(pos, 0, 2) > distance(pos, 0, 1)
        assert distance(pos, 0, 2) > distance(pos, 1, 2)

    def test_path_is_straightened(self, path3):
        """Test that a path is laid out nearly straight."""
        pos = kamada_kawai_layout(path3)
        d01 = distance(pos, 0, 1)
        d12 = distance(pos, 1, 2)
        assert distance(pos, 0, 2) == pytest.approx(d01 + d12, rel=1e-2)
        assert d01 == pytest.approx(d12, rel=1e-2)

    def test_rescaled(self, cycle4):
        """Test that the result is centred and scaled."""
        pos = kamada_kawai_layout(cycle4, scale=2.0, center=(1.0, -1.0))
        coords = np.array(list(pos.values()))
        np.testing.assert_allclose(coords.mean(axis=0), [1.0, -1.0], atol=1e-9)
        radius = np.linalg.norm(coords - [1.0, -1.0], axis=1).max()
        assert radius == pytest.approx(2.0)

    def test_weighted_edges(self):
        """Test that longer edges are drawn longer."""
        G = Graph(['a', 'b', 'c'], [('a', 'b', {'weight': 3.0}), ('b', 'c', {'weight': 1.0})])
        pos = kamada_kawai_layout(G)
        assert distance(pos, 'a', 'b') > distance(pos, 'b', 'c')

    def test_unweighted(self):
        """Test that weight=None ignores edge attributes."""
        G = Graph(['a', 'b', 'c'], [('a', 'b', {'weight': 3.0}), ('b', 'c', {'weight': 1.0})])
        pos = kamada_kawai_layout(G, weight=None)
        assert distance(pos, 'a', 'b') == pytest.approx(distance(pos, 'b', 'c'), rel=1e-2)

    def test_deterministic(self, cycle4):
        """Test that repeated calls agree."""
        a = kamada_kawai_layout(cycle4)
        b = kamada_kawai_layout(cycle4)
        for v in a:
            np.testing.assert_array_equal(a[v], b[v])

    def test_initial_positions(self, path3):
        """Test that supplied initial positions are used."""
        pos = kamada_kawai_layout(path3, pos={0: [0, 0], 1: [1, 0.1], 2: [2, 0]})
        assert len(pos) == 3
        assert distance(pos, 0, 2) > distance(pos, 0, 1)

    def test_3d(self, cycle4):
        """Test a 3D layout."""
        pos = kamada_kawai_layout(cycle4, dim=3)
        for p in pos.values():
            assert len(p) == 3
            assert np.all(np.isfinite(p))

    def test_1d(self, path3):
        """Test a 1D layout keeps the path order."""
        pos = kamada_kawai_layout(path3, dim=1)
        for p in pos.values():
            assert len(p) == 1
        x = [pos[v][0] for v in (0, 1, 2)]
        assert min(x[0], x[2]) < x[1] < max(x[0], x[2])

    def test_disconnected(self):
        """Test that unreachable pairs do not break the solver."""
        G = Graph([0, 1, 2, 3], [(0, 1), (2, 3)])
        pos = kamada_kawai_layout(G)
        for p in pos.values():
            assert np.all(np.isfinite(p))

    def test_center_mismatch(self, cycle4):
        """Test that a centre of the wrong length is rejected."""
        with pytest.raises(InvalidParameterError):
            kamada_kawai_layout(cycle4, center=(0, 0, 0))
