# tests/test_overlay.py
import pytest

from walkshed.overlay import ACTIVE, DELETED, OverlayManager, TestRoad, compute_enhanced
from walkshed.search import search

# length whose walk time is exactly 80 s
LEN_80S = 80 * 83.33 / 60


def _coord(net, node_id):
    n = net.get_node(node_id)
    return (n.lng, n.lat)


def test_test_road_shortcut_reaches_c(line_network):
    net, a, b, c = line_network
    ov = OverlayManager()
    ov.add_test_road(_coord(net, a), _coord(net, c), length=LEN_80S)

    base = search(net, a, 100)
    assert c not in base.reachable

    enhanced = compute_enhanced(net, ov, a, 100)
    assert enhanced.reachable[c] == pytest.approx(80)
    assert enhanced.reachable[b] == pytest.approx(72, rel=1e-3)
    assert enhanced.previous[c] == a


def test_base_network_is_never_modified(line_network):
    net, a, b, c = line_network
    edges_before = net.all_edges()
    ov = OverlayManager()
    ov.add_test_road(_coord(net, a), _coord(net, c), length=LEN_80S)
    ov.add_test_road((1.0, 1.0), (1.001, 1.0))
    ov.compute_enhanced(net, a, 1000)
    assert net.all_edges() == edges_before
    assert len(net) == 3


def test_default_length_is_great_circle():
    ov = OverlayManager()
    rid = ov.add_test_road({"lng": 0.0, "lat": 0.0}, {"lng": 0.0, "lat": 0.001})
    road = ov.get(rid)
    assert road.length == pytest.approx(111.19, rel=1e-3)
    assert road.time == pytest.approx(road.length / 83.33 * 60)


def test_degenerate_test_road_rejected():
    ov = OverlayManager()
    with pytest.raises(ValueError):
        ov.add_test_road((1.0, 1.0), (1.0, 1.0))
    with pytest.raises(ValueError):
        ov.add_test_road((1.0, 1.0), (1.0, 1.1), length=-5)
    assert ov.list_all() == []


def test_chain_of_test_roads_propagates(line_network):
    net, a, b, c = line_network
    ov = OverlayManager()
    mid = (0.0, 0.0005)
    far = (0.0, 0.001)
    ov.add_test_road(_coord(net, a), mid, length=50)
    ov.add_test_road(mid, far, length=50)

    enhanced = ov.compute_enhanced(net, a, 100)
    # second road's start snaps onto the first road's synthetic end node
    assert "t_1_b" in enhanced.reachable
    assert "t_2_a" not in enhanced.distances
    assert enhanced.reachable["t_2_b"] == pytest.approx(2 * 50 / 83.33 * 60)

    # the one-hop shortcut stops after the first road
    approx = ov.one_hop_estimate(net, search(net, a, 100))
    assert approx.approximate
    assert "t_1_b" in approx.reachable
    assert "t_2_b" not in approx.reachable


def test_enhanced_is_superset_of_base(grid_factory):
    net, ids = grid_factory(n=7, seed=9, drop=0.4)
    ov = OverlayManager()

    def c(i, j):
        return _coord(net, ids[i, j])

    ov.add_test_road(c(0, 0), c(6, 6))
    ov.add_test_road(c(3, 0), c(3, 6), length=10)
    ov.add_test_road(c(6, 0), (0.05, 0.05))
    # slower than the existing edge: must not reweight it upwards
    ov.add_test_road(c(0, 0), c(0, 1), length=10_000)
    for origin in (ids[0, 0], ids[3, 3], ids[6, 1]):
        for budget in (0, 120, 400, 900):
            base = search(net, origin, budget).reachable
            enh = ov.compute_enhanced(net, origin, budget).reachable
            assert set(enh) >= set(base)
            for n, d in base.items():
                assert enh[n] <= d + 1e-9


def test_soft_delete_and_ids_never_reused(line_network):
    net, a, b, c = line_network
    ov = OverlayManager()
    r1 = ov.add_test_road(_coord(net, a), _coord(net, c), length=LEN_80S)
    ov.remove_test_road(r1)
    ov.remove_test_road(r1)
    ov.remove_test_road("t_99")
    assert ov.get(r1).status == DELETED
    assert ov.list_active() == []
    assert c not in ov.compute_enhanced(net, a, 100).reachable

    r2 = ov.add_test_road((0.0, 0.0), (0.0, 0.001))
    assert r2 != r1 and r2 == "t_2"

    ov.restore_test_road(r1)
    assert ov.get(r1).status == ACTIVE
    assert c in ov.compute_enhanced(net, a, 100).reachable


def test_clear_soft_deletes_everything():
    ov = OverlayManager()
    ids = [ov.add_test_road((0.0, i * 0.001), (0.001, i * 0.001)) for i in range(3)]
    ov.clear()
    assert ov.list_active() == []
    assert [r.id for r in ov.list_all()] == ids
    assert ov.add_test_road((0.0, 0.0), (0.0, 0.002)) == "t_4"


def test_overlay_survives_base_edits(line_network):
    net, a, b, c = line_network
    ov = OverlayManager()
    ov.add_test_road(_coord(net, a), _coord(net, c), length=LEN_80S)
    net.remove_node(b)
    r = ov.compute_enhanced(net, a, 100)
    assert set(r.reachable) == {a, c}
    assert len(ov.list_active()) == 1


def test_fused_graph_is_frozen(line_network):
    import networkx as nx

    net, a, b, c = line_network
    ov = OverlayManager()
    ov.add_test_road(_coord(net, a), (5.0, 5.0))
    G = ov.fused_graph(net)
    assert nx.is_frozen(G)
    assert G.has_edge(a, "t_1_b")
    assert G.edges[a, "t_1_b"]["test_road"] == "t_1"


def test_test_road_is_a_plain_record():
    road = TestRoad("t_1", (0.0, 0.0), (0.0, 0.001), 100.0)
    assert road.active
    assert road.time == pytest.approx(72, rel=1e-3)
