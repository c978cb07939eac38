import pytest

from gbnfgraph.core import Edge, GrammarGraph, Node, NodeKind, Position


class GraphBuilder:
    """Small helper for assembling diagrams in tests."""

    def __init__(self):
        self.graph = GrammarGraph()

    def node(self, node_id, kind, x=0, y=0, name=None, **properties):
        self.graph.nodes.append(
            Node(node_id, kind, Position(x, y), name=name, properties=properties)
        )
        return self

    def start(self, node_id="start", x=0, y=0):
        return self.node(node_id, NodeKind.START, x, y)

    def end(self, node_id="end", x=1000, y=0):
        return self.node(node_id, NodeKind.END, x, y)

    def edge(self, source, target, source_handle=None, target_handle=None):
        self.graph.edges.append(Edge(source, target, source_handle, target_handle))
        return self

    def chain(self, *ids):
        for source, target in zip(ids, ids[1:]):
            self.edge(source, target)
        return self

    @property
    def nodes(self):
        return self.graph.nodes

    @property
    def edges(self):
        return self.graph.edges


@pytest.fixture
def builder():
    return GraphBuilder()
