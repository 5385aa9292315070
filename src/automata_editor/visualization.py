import logging

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import networkx as nx

from automata_editor.automaton import Automaton

logger = logging.getLogger(__name__)


def to_digraph(automaton: Automaton) -> nx.DiGraph:
    """Topology of ``automaton`` as a DiGraph.

    Parallel transitions between the same pair of states are merged into one
    edge whose ``label`` lists their symbols, comma separated, in order.
    """
    G = nx.DiGraph(name=automaton.name)
    for name, state in automaton.states.items():
        G.add_node(name, is_start=state.is_start, is_final=state.is_final)

    for t in automaton.transitions():
        if G.has_edge(t.source, t.target):
            existing_label = G.edges[t.source, t.target]["label"]
            if t.symbol not in existing_label.split(","):
                G.edges[t.source, t.target]["label"] = f"{existing_label},{t.symbol}"
        else:
            G.add_edge(t.source, t.target, label=t.symbol)

    return G


class AutomatonVisualizer:
    def __init__(self, automaton: Automaton):
        self.automaton = automaton

    def node_color(self, name: str) -> str:
        state = self.automaton.states[name]
        if state.is_start:
            return "lightgreen" if state.is_final else "lightblue"
        if state.is_final:
            return "lightcoral"
        return "lightgray"

    def plot(self, ax, title="Automaton"):
        G = to_digraph(self.automaton)

        if len(G.nodes) == 0:
            ax.text(
                0.5,
                0.5,
                "Empty Automaton",
                ha="center",
                va="center",
                transform=ax.transAxes,
            )
            ax.set_title(title)
            return

        if len(G.nodes) <= 6:
            pos = nx.spring_layout(G, k=2.5, iterations=100, seed=42)
        else:
            pos = nx.spring_layout(G, k=1.5, iterations=50, seed=42)

        node_size = min(2000, max(800, 15000 // max(len(G.nodes), 1)))
        nx.draw_networkx_nodes(
            G,
            pos,
            node_color=[self.node_color(n) for n in G.nodes()],
            node_size=node_size,
            ax=ax,
            alpha=0.9,
        )
        nx.draw_networkx_labels(G, pos, font_size=8, font_weight="bold", ax=ax)
        nx.draw_networkx_edges(
            G,
            pos,
            edge_color="gray",
            arrows=True,
            arrowsize=15,
            arrowstyle="->",
            width=1.2,
            node_size=node_size,
            ax=ax,
            alpha=0.7,
        )
        nx.draw_networkx_edge_labels(
            G,
            pos,
            edge_labels=nx.get_edge_attributes(G, "label"),
            font_size=7,
            bbox=dict(boxstyle="round,pad=0.2", facecolor="lightyellow", alpha=0.9),
            ax=ax,
        )
        ax.set_title(title, fontsize=12, fontweight="bold")
        ax.axis("off")


def save_plot(automaton: Automaton, path: str, title: str = None) -> None:
    fig, ax = plt.subplots(figsize=(8, 6))
    try:
        AutomatonVisualizer(automaton).plot(ax, title or automaton.name)
        fig.tight_layout()
        fig.savefig(path)
    finally:
        plt.close(fig)
    logger.info("plotted %s to %s", automaton.name, path)
