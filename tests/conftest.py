# tests/conftest.py
import random

import pytest

from walkshed.network import NetworkStore

# ~100 m east-west spacing at the equator
STEP_DEG = 0.0009


@pytest.fixture
def line_network():
    """A - B - C in a row, 100 m apart (72 s per edge)."""
    net = NetworkStore()
    a = net.add_node(0.0, 0.0)
    b = net.add_node(STEP_DEG, 0.0)
    c = net.add_node(2 * STEP_DEG, 0.0)
    net.add_edge(a, b, 100)
    net.add_edge(b, c, 100)
    return net, a, b, c


def make_grid(n=6, seed=7, drop=0.15):
    """n x n grid with random edge lengths and a few edges dropped."""
    rng = random.Random(seed)
    net = NetworkStore()
    ids = {}
    for i in range(n):
        for j in range(n):
            ids[i, j] = net.add_node(j * STEP_DEG, i * STEP_DEG, is_boundary=i in (0, n - 1) or j in (0, n - 1))
    for i in range(n):
        for j in range(n):
            for di, dj in ((0, 1), (1, 0)):
                if (i + di, j + dj) in ids and rng.random() > drop:
                    net.add_edge(ids[i, j], ids[i + di, j + dj], rng.uniform(50, 200))
    return net, ids


@pytest.fixture
def grid_network():
    return make_grid()


@pytest.fixture
def grid_factory():
    return make_grid
