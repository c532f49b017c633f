# tests/test_search.py
import time
from concurrent.futures import ThreadPoolExecutor

import networkx as nx
import pytest

from walkshed.errors import OriginNotFound, Unreachable
from walkshed.network import NetworkStore
from walkshed.search import reconstruct_path, search


def test_line_scenario_budget_100(line_network):
    net, a, b, c = line_network
    r = search(net, a, 100)
    assert set(r.reachable) == {a, b}
    assert r.reachable[a] == 0
    assert r.reachable[b] == pytest.approx(72, rel=1e-3)
    assert c not in r.reachable


def test_line_scenario_budget_150(line_network):
    net, a, b, c = line_network
    r = search(net, a, 150)
    assert r.reachable == pytest.approx({a: 0.0, b: 72.0, c: 144.0}, rel=1e-3)


def test_origin_kept_at_zero_for_any_budget(line_network):
    net, a, b, c = line_network
    for budget in (0, 0.5, 71, 1e9):
        r = search(net, a, budget)
        assert a in r.reachable
        assert r.reachable[a] == 0


def test_isolated_origin_is_reachable():
    net = NetworkStore()
    lone = net.add_node(5.0, 5.0)
    r = search(net, lone, 60)
    assert r.reachable == {lone: 0.0}


def test_missing_origin():
    net = NetworkStore()
    with pytest.raises(OriginNotFound):
        search(net, "n_1", 60)


def test_negative_budget():
    net = NetworkStore()
    a = net.add_node(0.0, 0.0)
    with pytest.raises(ValueError):
        search(net, a, -1)


def test_distances_within_budget(grid_factory):
    net, ids = grid_factory(n=7, seed=3)
    budget = 400
    r = search(net, ids[3, 3], budget)
    for n, d in r.reachable.items():
        assert d <= budget
    over = {n for n, d in r.distances.items() if d > budget}
    assert not over & set(r.reachable)


def test_matches_networkx_dijkstra(grid_factory):
    net, ids = grid_factory(n=8, seed=11)
    G = net.snapshot()
    origin = ids[0, 0]
    for budget in (0, 150, 500, 1200):
        ours = search(G, origin, budget).reachable
        ref = nx.single_source_dijkstra_path_length(G, origin, cutoff=budget, weight="travel_time")
        assert set(ours) == set(ref)
        for n in ref:
            assert ours[n] == pytest.approx(ref[n])


def test_larger_budget_is_superset(grid_factory):
    net, ids = grid_factory(n=7, seed=5)
    origin = ids[1, 4]
    prev = set()
    for budget in (0, 60, 120, 300, 600, 3600):
        cur = set(search(net, origin, budget).reachable)
        assert cur >= prev
        prev = cur


def test_over_budget_node_does_not_propagate():
    # a -(72s)- b -(72s)- c, and a -(long)- c
    net = NetworkStore()
    a, b, c, d = (net.add_node(i * 0.001, 0.0) for i in range(4))
    net.add_edge(a, b, 100)
    net.add_edge(b, c, 100)
    net.add_edge(c, d, 1)
    r = search(net, a, 100)
    assert c in r.distances          # tentatively labelled
    assert c not in r.reachable      # but over budget
    assert d not in r.distances      # never relaxed from c


def test_ties_broken_by_node_id():
    # two equal-cost routes to d; predecessor must be the lower id
    net = NetworkStore()
    o = net.add_node(0.0, 0.0)
    nodes = [net.add_node(0.001 * i, 0.001) for i in range(1, 12)]
    d = net.add_node(0.0, 0.002)
    for n in nodes:
        net.add_edge(o, n, 50)
        net.add_edge(n, d, 50)
    for _ in range(3):
        r = search(net, o, 1000)
        assert r.previous[d] == "n_2"


def test_reconstruct_path(line_network):
    net, a, b, c = line_network
    r = search(net, a, 150)
    assert reconstruct_path(r, a, c) == [a, b, c]
    assert reconstruct_path(r, a, a) == [a]


def test_reconstruct_path_unreachable(line_network):
    net, a, b, c = line_network
    net.remove_edge(b, c)
    r = search(net, a, 1000)
    with pytest.raises(Unreachable) as ei:
        reconstruct_path(r, a, c)
    assert ei.value.target == c


def test_deadline_returns_truncated_partial_result(grid_factory):
    net, ids = grid_factory(n=6)
    origin = ids[0, 0]
    r = search(net, origin, 10_000, deadline=time.monotonic() - 1)
    assert r.truncated
    assert r.reachable == {origin: 0.0}
    full = search(net, origin, 10_000)
    assert not full.truncated
    assert set(r.reachable) <= set(full.reachable)


def test_concurrent_searches_on_one_snapshot(grid_factory):
    net, ids = grid_factory(n=8, seed=2)
    G = net.snapshot()
    origins = [ids[i, i] for i in range(8)]
    with ThreadPoolExecutor(max_workers=4) as ex:
        parallel = list(ex.map(lambda o: search(G, o, 600).reachable, origins))
    serial = [search(G, o, 600).reachable for o in origins]
    assert parallel == serial


@pytest.mark.parametrize("budget", [float("nan"), float("inf"), -0.5])
def test_non_finite_or_negative_budget_rejected(line_network, budget):
    net, a, b, c = line_network
    with pytest.raises(ValueError):
        search(net, a, budget)
