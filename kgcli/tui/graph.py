# SPDX-License-Identifier: MIT
"""Knowledge graph as an expandable node list.

Each node can be expanded to show the notes it links to. Only the first
``max_nodes`` nodes are drawn; +/- adjusts that in steps of 10.
"""
from typing import Dict, List, Optional, Set

try:
    from kgcli.models import GraphEdge, GraphResponse
    from kgcli.tui.commands import Command, api_call, emit
    from kgcli.tui.controller import ViewController, move_cursor
    from kgcli.tui.formatting import truncate_text
    from kgcli.tui.messages import GraphError, GraphFetched, Key, Message, OpenNote
except ImportError:
    from ..models import GraphEdge, GraphResponse
    from .commands import Command, api_call, emit
    from .controller import ViewController, move_cursor
    from .formatting import truncate_text
    from .messages import GraphError, GraphFetched, Key, Message, OpenNote

DEFAULT_MAX_NODES = 20
MIN_NODES = 10
MAX_NODES = 100
NODE_STEP = 10
AUTO_EXPAND = 3
NODE_TITLE_LENGTH = 50
TARGET_TITLE_LENGTH = 40


class GraphView(ViewController):
    def __init__(self, client) -> None:
        super().__init__(client)
        self.graph: Optional[GraphResponse] = None
        self.loading = False
        self.error = ""
        self.selected = 0
        self.expanded: Set[str] = set()
        self.max_nodes = DEFAULT_MAX_NODES

    def init(self) -> Optional[Command]:
        self.loading = True
        self.error = ""
        client = self.client
        return api_call("get_graph", client.get_graph, GraphFetched, GraphError)

    @property
    def node_count(self) -> int:
        return len(self.graph.nodes) if self.graph else 0

    @property
    def display_count(self) -> int:
        return min(self.max_nodes, self.node_count)

    def connections(self) -> Dict[str, List[GraphEdge]]:
        """Outgoing edges keyed by source node id."""
        adjacency: Dict[str, List[GraphEdge]] = {}
        for edge in self.graph.edges if self.graph else []:
            adjacency.setdefault(edge.source, []).append(edge)
        return adjacency

    def update(self, msg: Message) -> Optional[Command]:
        if isinstance(msg, GraphFetched):
            self.graph = msg.graph
            self.loading = False
            self.expanded = {node.id for node in msg.graph.nodes[:AUTO_EXPAND]}
            self.selected = move_cursor(self.selected, 0, self.display_count)
        elif isinstance(msg, GraphError):
            self.error = msg.error
            self.loading = False
        elif isinstance(msg, Key):
            return self._handle_key(msg)
        return None

    def _handle_key(self, msg: Key) -> Optional[Command]:
        key = msg.key
        if key in ("j", "down"):
            self.selected = move_cursor(self.selected, 1, self.display_count)
        elif key in ("k", "up"):
            self.selected = move_cursor(self.selected, -1, self.display_count)
        elif key in ("+", "="):
            self.max_nodes = min(MAX_NODES, self.max_nodes + NODE_STEP)
        elif key in ("-", "_"):
            self.max_nodes = max(MIN_NODES, self.max_nodes - NODE_STEP)
            self.selected = move_cursor(self.selected, 0, self.display_count)
        elif key == "enter":
            if self.display_count:
                return emit(OpenNote(self.graph.nodes[self.selected].id))
        elif key == "space":
            if self.display_count:
                node_id = self.graph.nodes[self.selected].id
                if node_id in self.expanded:
                    self.expanded.discard(node_id)
                else:
                    self.expanded.add(node_id)
        elif key == "r":
            self.graph = None
            self.selected = 0
            return self.init()
        return None

    def _title(self, node_id: str) -> str:
        for node in self.graph.nodes if self.graph else []:
            if node.id == node_id:
                return truncate_text(node.title or "(untitled)", TARGET_TITLE_LENGTH)
        return "(unknown)"

    def render(self) -> str:
        if self.loading:
            return "Loading knowledge graph..."
        if self.error:
            return f"Error: {self.error}"

        lines = ["KNOWLEDGE GRAPH", ""]
        if not self.node_count:
            lines += ["(no notes in knowledge graph)", "", "+:more nodes -:fewer nodes ESC:back ?:help"]
            return "\n".join(lines)

        if self.graph.stats is not None:
            stats = self.graph.stats
            lines += [f"Nodes: {stats.total_notes} | Links: {stats.total_links}", ""]

        adjacency = self.connections()
        for i in range(self.display_count):
            node = self.graph.nodes[i]
            indicator = "→ " if i == self.selected else "  "
            if adjacency.get(node.id):
                marker = "[-]" if node.id in self.expanded else "[+]"
            else:
                marker = "   "
            title = truncate_text(node.title or "(untitled)", NODE_TITLE_LENGTH)
            lines.append(f"{indicator}{marker} {title}")
            if node.id in self.expanded:
                for edge in adjacency.get(node.id, []):
                    lines.append(f"    └─→ {self._title(edge.target)}")

        hidden = self.node_count - self.display_count
        if hidden > 0:
            lines += ["", f"... and {hidden} more (press + to show more)"]
        return "\n".join(lines)
