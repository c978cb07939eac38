from gbnfgraph.core import NodeKind, validate_graph


def test_connected_graph_is_valid(builder):
    builder.start().node("a", NodeKind.LETTER).end().chain("start", "a", "end")

    report = validate_graph(builder.nodes, builder.edges)

    assert report.valid
    assert report.problems == []


def test_unconnected_start_and_end_reported_by_label(builder):
    builder.start().end()

    report = validate_graph(builder.nodes, builder.edges)

    assert not report.valid
    assert report.problems == ["Start", "End"]


def test_middle_node_needs_both_directions(builder):
    builder.start().node("a", NodeKind.DIGIT, name="Year").node("b", NodeKind.LETTER).end()
    builder.edge("start", "a").edge("start", "b").edge("b", "end")

    report = validate_graph(builder.nodes, builder.edges)

    assert not report.valid
    assert report.problems == ["Year"]


def test_unnamed_node_reported_by_kind_label(builder):
    builder.start().node("r", NodeKind.ROUTER).end()
    builder.edge("start", "end").edge("r", "end")

    report = validate_graph(builder.nodes, builder.edges)

    assert report.problems == ["Router"]


def test_problems_keep_node_order(builder):
    builder.node("x", NodeKind.STRING, name="second")
    builder.start().end()
    builder.node("y", NodeKind.TIME)

    report = validate_graph(builder.nodes, builder.edges)

    assert report.problems == ["second", "Start", "End", "Time Duration"]


def test_validation_does_not_mutate_input(builder):
    builder.start().node("a", NodeKind.LETTER).end().chain("start", "a")
    nodes, edges = list(builder.nodes), list(builder.edges)

    validate_graph(builder.nodes, builder.edges)

    assert builder.nodes == nodes
    assert builder.edges == edges
