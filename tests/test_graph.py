import pytest

from pocr.graph import CFLEdge, CFLNode, RepGraph


def make_graph(node_ids, edges):
    graph = RepGraph()
    for node_id in node_ids:
        graph.add_node(node_id)
    for src, dst, kind, idx in edges:
        graph.add_edge(src, dst, kind, idx)
    return graph


def edge_keys(graph):
    return [edge.key for edge in graph.edges]


def test_nodes_iterate_sorted_and_track_max():
    graph = make_graph([5, 2, 9], [])
    assert list(graph) == [2, 5, 9]
    assert len(graph) == 3
    assert graph.max_node_id == 9
    assert graph.get_node(5).id == 5


def test_add_node_twice_keeps_same_node():
    graph = make_graph([1], [])
    first = graph.get_node(1)
    graph.add_node(1)
    assert graph.get_node(1) is first
    assert len(graph) == 1


def test_get_missing_node_raises():
    graph = make_graph([1], [])
    with pytest.raises(KeyError):
        graph.get_node(7)


def test_add_edge_and_duplicate():
    graph = make_graph([1, 2], [])
    assert graph.add_edge(1, 2, 0, 0) is True
    assert graph.add_edge(1, 2, 0, 0) is False
    assert graph.add_edge(1, 2, 0, 4) is True
    assert graph.has_edge(1, 2, 0, 4)
    assert not graph.has_edge(2, 1, 0, 0)
    assert len(graph.edges) == 2


def test_edge_registered_on_both_ends():
    graph = make_graph([1, 2], [(1, 2, 3, 0)])
    edge = graph.get_edge(1, 2, 3, 0)
    assert edge in graph.get_node(1).out_edges
    assert edge in graph.get_node(2).in_edges
    assert graph.get_node(1).out_edges_of_kind(3) == {edge}
    assert graph.get_node(2).in_edges_of_kind(3) == {edge}
    assert graph.get_node(2).out_edges_of_kind(3) == set()


def test_get_missing_edge_raises():
    graph = make_graph([1, 2], [])
    with pytest.raises(KeyError):
        graph.get_edge(1, 2, 0, 0)


def test_remove_edge():
    graph = make_graph([1, 2], [(1, 2, 0, 0)])
    edge = graph.get_edge(1, 2, 0, 0)
    graph.remove_edge(edge)
    assert graph.edges == []
    assert not graph.get_node(1).has_outgoing_edge()
    assert not graph.get_node(2).has_incoming_edge()
    with pytest.raises(KeyError):
        graph.remove_edge(edge)


def test_edges_are_ordered_by_kind_then_ends_then_index():
    graph = make_graph([1, 2, 3], [(2, 3, 1, 0), (1, 2, 1, 5), (1, 2, 1, 2), (3, 1, 0, 0)])
    keys = edge_keys(graph)
    assert keys == sorted(keys)
    assert keys[0] == (0, 3, 1, 0)


def test_edge_equality_by_key():
    a, b = CFLNode(1), CFLNode(2)
    first = CFLEdge(a, b, 0, 1)
    second = CFLEdge(a, b, 0, 1)
    third = CFLEdge(a, b, 0, 2)
    assert first == second
    assert hash(first) == hash(second)
    assert first < third
    assert len({first, second, third}) == 2
    assert first.dyck_contributing is False


def test_node_rejects_edge_with_wrong_end():
    a, b = CFLNode(1), CFLNode(2)
    edge = CFLEdge(a, b, 0)
    with pytest.raises(ValueError):
        a.add_in_edge(edge)
    with pytest.raises(ValueError):
        b.add_out_edge(edge)


def test_node_add_and_remove_report_change():
    a, b = CFLNode(1), CFLNode(2)
    edge = CFLEdge(a, b, 0)
    assert a.add_out_edge(edge) is True
    assert a.add_out_edge(edge) is False
    assert a.remove_out_edge(edge) is True
    assert a.remove_out_edge(edge) is False


def test_direct_kinds_tracked():
    a, b = CFLNode(1, direct_kinds={0}), CFLNode(2, direct_kinds={0})
    direct = CFLEdge(a, b, 0)
    other = CFLEdge(a, b, 1)
    for edge in (direct, other):
        a.add_out_edge(edge)
        b.add_in_edge(edge)
    assert a.direct_out_edges == {direct}
    assert b.direct_in_edges == {direct}
    a.remove_out_edge(direct)
    assert a.direct_out_edges == set()


def test_merge_moves_edges_and_sets_rep():
    graph = make_graph([1, 2, 3], [(1, 2, 0, 0), (2, 3, 1, 0)])
    graph.merge_node_to_rep(2, 1)
    assert not graph.has_node(2)
    assert graph.rep_node_id(2) == 1
    assert graph.get_node(2) is graph.get_node(1)
    assert graph.sub_node_ids(1) == {1, 2}
    assert edge_keys(graph) == [(0, 1, 1, 0), (1, 1, 3, 0)]


def test_merge_of_merged_node_is_ignored():
    graph = make_graph([1, 2, 3], [(2, 3, 0, 0)])
    graph.merge_node_to_rep(2, 1)
    before = edge_keys(graph)
    graph.merge_node_to_rep(2, 3)
    assert graph.rep_node_id(2) == 1
    assert edge_keys(graph) == before
    graph.merge_node_to_rep(1, 1)
    assert graph.has_node(1)


def test_chained_merges_update_all_subs():
    graph = make_graph([1, 2, 4], [(1, 2, 0, 0), (2, 4, 0, 0)])
    graph.merge_node_to_rep(2, 1)
    graph.merge_node_to_rep(1, 4)
    assert graph.rep_node_id(2) == 4
    assert graph.rep_node_id(1) == 4
    assert graph.sub_node_ids(4) == {1, 2, 4}
    assert list(graph) == [4]
    assert all(e.src_id == 4 and e.dst_id == 4 for e in graph.edges)


def test_move_in_edges_reports_cycle():
    graph = make_graph([1, 2, 3], [(3, 2, 0, 0)])
    node, rep = graph.get_node(2), graph.get_node(1)
    assert graph.move_in_edges_to_rep_node(node, rep) is False
    assert graph.has_edge(3, 1, 0, 0)

    graph = make_graph([1, 2], [(1, 2, 0, 0)])
    assert graph.move_in_edges_to_rep_node(graph.get_node(2), graph.get_node(1)) is True
    assert graph.has_edge(1, 1, 0, 0)


def test_retarget_keeps_kind_and_index():
    graph = make_graph([1, 2, 3], [(1, 2, 2, 7)])
    edge = graph.get_edge(1, 2, 2, 7)
    graph.retarget_dst_of_edge(edge, graph.get_node(3))
    assert edge_keys(graph) == [(2, 1, 3, 7)]
    graph.retarget_src_of_edge(graph.get_edge(1, 3, 2, 7), graph.get_node(2))
    assert edge_keys(graph) == [(2, 2, 3, 7)]


def test_set_and_reset_subs():
    graph = make_graph([1], [])
    graph.set_subs(1, {5, 6})
    assert graph.sub_node_ids(1) == {1, 5, 6}
    graph.reset_subs(1)
    assert graph.sub_node_ids(1) == {1}