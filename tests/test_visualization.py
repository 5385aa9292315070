import matplotlib.pyplot as plt

from automata_editor import EMPTY_SYMBOL, Automaton, nfa_to_dfa
from automata_editor.visualization import AutomatonVisualizer, save_plot, to_digraph


class TestDigraph:
    def test_nodes_carry_flags(self, ends_with_ab):
        G = to_digraph(ends_with_ab)
        assert list(G.nodes) == ["q0", "q1", "q2"]
        assert G.nodes["q0"] == {"is_start": True, "is_final": False}
        assert G.nodes["q2"]["is_final"]

    def test_parallel_edges_are_merged(self, ends_with_ab):
        G = to_digraph(ends_with_ab)
        assert G.number_of_edges() == 3
        assert G.edges["q0", "q0"]["label"] == "a,b"
        assert G.edges["q1", "q2"]["label"] == "b"

    def test_empty_symbol_label(self, epsilon_chain):
        G = to_digraph(epsilon_chain)
        assert G.edges["q0", "q1"]["label"] == EMPTY_SYMBOL


class TestPlot:
    def test_node_colors(self, single_state, ends_with_ab):
        assert AutomatonVisualizer(single_state).node_color("q0") == "lightgreen"
        v = AutomatonVisualizer(ends_with_ab)
        assert [v.node_color(n) for n in ends_with_ab] == ["lightblue", "lightgray", "lightcoral"]

    def test_plot_empty_automaton(self):
        fig, ax = plt.subplots()
        try:
            AutomatonVisualizer(Automaton()).plot(ax, "nothing")
            assert ax.get_title() == "nothing"
            assert [t.get_text() for t in ax.texts] == ["Empty Automaton"]
        finally:
            plt.close(fig)

    def test_plot_converted_automaton(self, ends_with_ab):
        fig, ax = plt.subplots()
        try:
            AutomatonVisualizer(nfa_to_dfa(ends_with_ab)).plot(ax, "dfa")
            assert ax.get_title() == "dfa"
        finally:
            plt.close(fig)

    def test_save_plot(self, tmp_path, epsilon_chain):
        path = tmp_path / "chain.png"
        save_plot(epsilon_chain, str(path))
        assert path.stat().st_size > 0
