import json

import pytest

from gbnfgraph.core import (
    Edge,
    GrammarGraph,
    Node,
    NodeKind,
    Position,
    export_filename,
    unescape_literal,
)

SAVED = {
    "id": "g1",
    "name": "Yes Or No",
    "nodes": [
        {"id": "start", "type": "startNode", "position": {"x": 0, "y": 0},
         "data": {"label": "Start", "name": "root", "properties": {}}},
        {"id": "n1", "type": "stringNode", "position": {"x": 300, "y": 40},
         "data": {"label": "String Match", "name": "Answer",
                  "properties": {"value": "say \\\"yes\\\"\\n"}}},
        {"id": "end", "type": "endNode", "position": {"x": 1000, "y": 0},
         "data": {"label": "End", "name": None, "properties": {}}},
    ],
    "edges": [
        {"id": "e1", "source": "start", "target": "n1", "sourceHandle": None, "targetHandle": None},
        {"id": "e2", "source": "n1", "target": "end"},
    ],
    "createdAt": 1700000000000,
    "updatedAt": 1700000000000,
}


def test_node_kind_from_tag():
    assert NodeKind.from_tag("charSetNode") is NodeKind.CHAR_SET
    assert NodeKind.CHAR_SET.label == "Character Set"
    with pytest.raises(ValueError, match="Unknown node type"):
        NodeKind.from_tag("regexNode")


def test_from_dict_reads_editor_shape():
    graph = GrammarGraph.from_dict(SAVED)

    assert graph.name == "Yes Or No"
    assert graph.id == "g1"
    assert [n.kind for n in graph.nodes] == [NodeKind.START, NodeKind.STRING, NodeKind.END]

    answer = graph.get_node("n1")
    assert answer.position == Position(300, 40)
    assert answer.name == "Answer"
    assert answer.label == "String Match"
    assert answer.properties["value"] == 'say "yes"\n'

    assert graph.edges == [Edge("start", "n1"), Edge("n1", "end")]
    assert graph.get_node("missing") is None


def test_from_dict_requires_nodes_and_edges():
    with pytest.raises(ValueError, match="'nodes' and 'edges'"):
        GrammarGraph.from_dict({"nodes": []})


def test_unescape_literal():
    assert unescape_literal("a\\\\n") == "a\\n"
    assert unescape_literal('\\"q\\"\\t\\r\\n') == '"q"\t\r\n'
    assert unescape_literal("plain") == "plain"


def test_display_name():
    assert Node("a", NodeKind.DIGIT, name="Year").display_name == "Year"
    assert Node("a", NodeKind.DIGIT, label="Digit 2").display_name == "Digit 2"
    assert Node("a", NodeKind.DIGIT).display_name == "Digit"
    assert Node("s", NodeKind.START, name="root").display_name == "Start"


def test_edge_key():
    assert Edge("a", "b").key == "a->b"
    assert Edge("a", "b", "out", None).key == "a->out->b"
    assert Edge("a", "b", "out", "in").key == "a->out->b->in"
    assert Edge("a", "a").is_self_loop


def test_export_filename():
    assert export_filename("Yes Or No") == "yes_or_no.gbnf"
    assert export_filename(None) == "grammar.gbnf"
    assert export_filename("") == "grammar.gbnf"


def test_load_single_grammar(tmp_path):
    path = tmp_path / "grammar.json"
    path.write_text(json.dumps(SAVED))

    graph = GrammarGraph.load(path)

    assert len(graph.nodes) == 3
    assert len(graph.edges) == 2


def test_load_from_saved_list(tmp_path):
    other = dict(SAVED, id="g2", name="Other", edges=[])
    path = tmp_path / "grammars.json"
    path.write_text(json.dumps([other, SAVED]))

    assert GrammarGraph.load(path).id == "g2"
    assert GrammarGraph.load(path, grammar="g1").name == "Yes Or No"
    assert GrammarGraph.load(path, grammar="Yes Or No").id == "g1"
    with pytest.raises(ValueError, match="Unknown grammar"):
        GrammarGraph.load(path, grammar="nope")


def test_load_empty_list(tmp_path):
    path = tmp_path / "grammars.json"
    path.write_text("[]")

    with pytest.raises(ValueError, match="empty"):
        GrammarGraph.load(path)


def test_initial_graph():
    graph = GrammarGraph.initial()

    assert [n.kind for n in graph.nodes] == [NodeKind.START, NodeKind.END]
    assert graph.nodes[1].position == Position(1000, 0)
    assert graph.edges == []
