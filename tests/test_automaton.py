import pytest

from automata_editor import (
    EMPTY_SYMBOL,
    Automaton,
    DuplicateState,
    MachineKind,
    MalformedAutomaton,
    Move,
    NoStartState,
    PushdownPayload,
    State,
    Transition,
    TuringPayload,
    UnknownState,
    alphabet,
    contains_final,
    find_start,
)


class TestGraph:
    def test_lookup_and_enumeration(self, ends_with_ab):
        assert list(ends_with_ab) == ["q0", "q1", "q2"]
        assert len(ends_with_ab) == 3
        assert "q1" in ends_with_ab
        assert ends_with_ab["q2"].is_final
        assert [t.target for t in ends_with_ab.out("q0")] == ["q0", "q0", "q1"]
        assert sum(1 for _ in ends_with_ab.transitions()) == 4

    def test_unknown_state_lookup(self, ends_with_ab):
        with pytest.raises(UnknownState):
            ends_with_ab.state("q9")
        with pytest.raises(KeyError):
            ends_with_ab["q9"]

    def test_duplicate_states_rejected(self):
        with pytest.raises(DuplicateState):
            Automaton([State("q0"), State("q0")])

    def test_transition_table(self, branching_nfa):
        assert branching_nfa.transition_table() == {
            "q0": {"a": {"q1", "q2"}},
            "q1": {},
            "q2": {},
        }

    def test_is_deterministic(self, branching_nfa, epsilon_loop, make_automaton):
        assert not branching_nfa.is_deterministic()
        assert not epsilon_loop.is_deterministic()
        assert make_automaton([("q0", "a", "q1"), ("q1", "a", "q0")]).is_deterministic()

    def test_get_stats(self, epsilon_chain):
        assert epsilon_chain.get_stats() == {
            "states": 3,
            "alphabet_size": 2,
            "accept_states": 1,
            "total_transitions": 4,
            "epsilon_transitions": 2,
            "is_dfa": False,
        }

    def test_copy_is_independent(self, ends_with_ab):
        clone = ends_with_ab.copy()
        clone.toggle_final("q0")
        clone.add_transition("q2", "q0", "a")
        assert not ends_with_ab["q0"].is_final
        assert ends_with_ab.out("q2") == []
        assert clone.transition_table() != ends_with_ab.transition_table()


class TestValidate:
    def test_well_formed(self, epsilon_chain):
        epsilon_chain.validate()

    def test_dangling_target(self):
        a = Automaton([State("q0", is_start=True, out=[Transition("q0", "q7", "a")])])
        with pytest.raises(MalformedAutomaton, match="missing state"):
            a.validate()

    def test_two_start_states(self):
        a = Automaton([State("q0", is_start=True), State("q1", is_start=True)])
        with pytest.raises(MalformedAutomaton, match="multiple start states"):
            a.validate()

    def test_source_mismatch(self):
        a = Automaton([State("q0", is_start=True, out=[Transition("q1", "q0", "a")]), State("q1")])
        with pytest.raises(MalformedAutomaton):
            a.validate()

    def test_key_name_mismatch(self, ends_with_ab):
        ends_with_ab.states["q1"].name = "other"
        with pytest.raises(MalformedAutomaton):
            ends_with_ab.validate()

    def test_empty_name(self):
        with pytest.raises(MalformedAutomaton):
            Automaton([State("", is_start=True)]).validate()

    def test_payload_must_fit_kind(self):
        a = Automaton(
            [State("q0", is_start=True, out=[Transition("q0", "q0", "a", TuringPayload("x"))])],
            kind=MachineKind.PUSHDOWN,
        )
        with pytest.raises(MalformedAutomaton):
            a.validate()


class TestQueries:
    def test_alphabet_excludes_empty_and_collapses(self, epsilon_chain):
        epsilon_chain.add_transition("q0", "q0", "a")
        assert alphabet(epsilon_chain) == {"a", "b"}

    def test_alphabet_includes_declared_symbols(self, single_state):
        assert alphabet(single_state) == {"a"}

    def test_declared_empty_symbol_is_ignored(self):
        a = Automaton(alphabet=["a", "", "eps"])
        assert alphabet(a) == {"a"}

    def test_find_start(self, ends_with_ab):
        assert find_start(ends_with_ab) == "q0"

    def test_find_start_empty_automaton(self):
        with pytest.raises(NoStartState):
            find_start(Automaton())

    def test_find_start_without_flag(self):
        with pytest.raises(NoStartState):
            find_start(Automaton([State("q0"), State("q1")]))

    def test_find_start_two_flags(self):
        with pytest.raises(MalformedAutomaton):
            find_start(Automaton([State("q0", is_start=True), State("q1", is_start=True)]))

    def test_contains_final(self, ends_with_ab):
        assert contains_final({"q0", "q2"}, ends_with_ab)
        assert not contains_final({"q0", "q1"}, ends_with_ab)
        assert not contains_final(set(), ends_with_ab)

    def test_contains_final_unknown_state(self, ends_with_ab):
        with pytest.raises(MalformedAutomaton):
            contains_final({"zz"}, ends_with_ab)


class TestEditing:
    def test_first_state_becomes_start(self):
        a = Automaton()
        q0 = a.add_state()
        q1 = a.add_state()
        assert (q0.name, q1.name) == ("q0", "q1")
        assert q0.is_start and not q1.is_start

    def test_find_unused_name_fills_gaps(self):
        a = Automaton([State("q0", is_start=True), State("q2")])
        assert a.find_unused_name() == "q1"
        assert a.add_state().name == "q1"
        assert a.find_unused_name() == "q3"

    def test_add_existing_state(self, ends_with_ab):
        with pytest.raises(DuplicateState):
            ends_with_ab.add_state("q1")

    def test_remove_state_drops_incoming_edges(self, ends_with_ab):
        ends_with_ab.remove_state("q1")
        assert list(ends_with_ab) == ["q0", "q2"]
        assert all(t.target != "q1" for t in ends_with_ab.transitions())
        ends_with_ab.validate()

    def test_remove_start_promotes_first_remaining(self, ends_with_ab):
        ends_with_ab.remove_state("q0")
        assert find_start(ends_with_ab) == "q1"

    def test_remove_last_state(self):
        a = Automaton()
        a.add_state()
        a.remove_state("q0")
        assert len(a) == 0

    def test_rename_state_rewrites_edges(self, ends_with_ab):
        ends_with_ab.rename_state("q0", "start")
        assert list(ends_with_ab) == ["start", "q1", "q2"]
        assert ends_with_ab["start"].name == "start"
        assert {t.source for t in ends_with_ab.out("start")} == {"start"}
        assert [t.target for t in ends_with_ab.out("start")] == ["start", "start", "q1"]
        ends_with_ab.validate()

    def test_rename_to_same_name_is_noop(self, ends_with_ab):
        ends_with_ab.rename_state("q1", "q1")
        assert list(ends_with_ab) == ["q0", "q1", "q2"]

    def test_rename_onto_existing(self, ends_with_ab):
        with pytest.raises(DuplicateState):
            ends_with_ab.rename_state("q0", "q1")
        assert list(ends_with_ab) == ["q0", "q1", "q2"]

    def test_set_start_and_toggle_final(self, ends_with_ab):
        ends_with_ab.set_start("q2")
        assert find_start(ends_with_ab) == "q2"
        assert not ends_with_ab["q0"].is_start
        assert ends_with_ab.toggle_final("q2") is False
        assert ends_with_ab.toggle_final("q2") is True

    def test_add_transition_normalizes_empty_symbol(self, ends_with_ab):
        t = ends_with_ab.add_transition("q2", "q0", "")
        assert t.symbol == EMPTY_SYMBOL
        assert t.is_empty
        assert ends_with_ab.add_transition("q2", "q1").symbol == EMPTY_SYMBOL

    def test_add_transition_unknown_endpoint(self, ends_with_ab):
        with pytest.raises(UnknownState):
            ends_with_ab.add_transition("q0", "nowhere", "a")

    def test_add_transition_payload_kind(self):
        a = Automaton(kind=MachineKind.PUSHDOWN)
        a.add_state()
        t = a.add_transition("q0", "q0", "a", PushdownPayload(pop="Z", push="AZ"))
        assert t.payload.push == "AZ"
        with pytest.raises(ValueError):
            a.add_transition("q0", "q0", "a", TuringPayload("x", Move.LEFT))

    def test_remove_transition(self, ends_with_ab):
        ends_with_ab.remove_transition(Transition("q0", "q0", "b"))
        assert [t.symbol for t in ends_with_ab.out("q0")] == ["a", "a"]
        with pytest.raises(ValueError):
            ends_with_ab.remove_transition(Transition("q0", "q0", "b"))

    def test_relabel_transition(self, ends_with_ab):
        t = ends_with_ab.relabel_transition(Transition("q1", "q2", "b"), "c")
        assert t.symbol == "c"
        assert ends_with_ab.out("q1") == [Transition("q1", "q2", "c")]
        assert alphabet(ends_with_ab) == {"a", "b", "c"}
