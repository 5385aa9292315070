import json
import logging
import os
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from automata_editor.automaton import (
    EMPTY_SYMBOL,
    Automaton,
    MachineKind,
    Move,
    Payload,
    PushdownPayload,
    State,
    Transition,
    TuringPayload,
    normalize_symbol,
)
from automata_editor.exceptions import AutomatonFormatError

logger = logging.getLogger(__name__)


def detect_format_from_ext(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    if ext in (".json", ".jsn"):
        return "json"
    if ext in (".xml",):
        return "xml"
    return "json"


def _parse_kind(value: Optional[str]) -> MachineKind:
    try:
        return MachineKind(value or MachineKind.FINITE.value)
    except ValueError:
        raise AutomatonFormatError(f"unknown machine kind {value!r}") from None


def _parse_payload(kind: MachineKind, fields: Dict) -> Optional[Payload]:
    if kind is MachineKind.PUSHDOWN:
        return PushdownPayload(
            pop=normalize_symbol(fields.get("pop") or ""),
            push=normalize_symbol(fields.get("push") or ""),
        )
    if kind is MachineKind.TURING:
        if fields.get("write") is None:
            raise AutomatonFormatError("Turing transition without a write symbol")
        try:
            move = Move(fields.get("move") or Move.RIGHT.value)
        except ValueError:
            raise AutomatonFormatError(f"unknown head move {fields.get('move')!r}") from None
        return TuringPayload(write=fields["write"], move=move)
    return None


def _payload_fields(payload: Optional[Payload]) -> Dict[str, str]:
    if isinstance(payload, PushdownPayload):
        return {"pop": payload.pop, "push": payload.push}
    if isinstance(payload, TuringPayload):
        return {"write": payload.write, "move": payload.move.value}
    return {}


def _json_flag(record: dict, key: str) -> bool:
    value = record.get(key, False)
    if not isinstance(value, bool):
        raise AutomatonFormatError(f"{key!r} must be true or false, got {value!r}")
    return value


def _from_records(data: dict, name: str) -> Automaton:
    kind = _parse_kind(data.get("kind"))
    states: List[State] = []
    for record in data.get("states", []):
        try:
            state_name = record["name"]
            state = State(
                name=state_name,
                is_start=_json_flag(record, "is_start"),
                is_final=_json_flag(record, "is_final"),
            )
            for edge in record.get("out", []):
                state.out.append(
                    Transition(
                        source=state_name,
                        target=edge["to"],
                        symbol=normalize_symbol(edge.get("symbol", EMPTY_SYMBOL)),
                        payload=_parse_payload(kind, edge),
                    )
                )
        except (KeyError, TypeError, AttributeError) as e:
            raise AutomatonFormatError(f"malformed state record {record!r}: {e}") from None
        states.append(state)
    return Automaton(states, name=name, kind=kind, alphabet=data.get("alphabet", []))


def _from_table(data: dict, name: str) -> Automaton:
    # {"states": [...], "start_state": ..., "accept_states": [...],
    #  "transitions": {state: {symbol: dest | [dests]}}}
    start_state = data.get("start_state")
    raw_trans = data.get("transitions", {})
    if not isinstance(raw_trans, dict):
        raise AutomatonFormatError("'transitions' must map states to symbol maps")

    edges: List[Transition] = []
    try:
        accept_states = set(data.get("accept_states", []))
        names: Dict[str, None] = dict.fromkeys(data.get("states", []))
        if start_state is not None:
            names.setdefault(start_state)
        for s, symbol_map in raw_trans.items():
            names.setdefault(s)
            for sym, dests in symbol_map.items():
                if isinstance(dests, str):
                    dests = [dests]
                for d in dests:
                    names.setdefault(d)
                    edges.append(Transition(s, d, normalize_symbol(sym)))
    except (TypeError, AttributeError) as e:
        raise AutomatonFormatError(f"malformed transition table: {e}") from None

    states = {
        n: State(n, is_start=(n == start_state), is_final=(n in accept_states))
        for n in names
    }
    for t in edges:
        states[t.source].out.append(t)
    return Automaton(states.values(), name=name, alphabet=data.get("alphabet", []))


def automaton_from_json_dict(data: dict, name: str = "automaton") -> Automaton:
    if not isinstance(data, dict):
        raise AutomatonFormatError("expected a JSON object")
    name = data.get("name", name)
    listed = data.get("states", [])
    if "start_state" in data or "transitions" in data or any(isinstance(s, str) for s in listed):
        a = _from_table(data, name)
    else:
        a = _from_records(data, name)
    a.validate()
    return a


def parse_json_automaton(path: str) -> Automaton:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise AutomatonFormatError(str(e), path) from e
    default_name = os.path.splitext(os.path.basename(path))[0]
    try:
        a = automaton_from_json_dict(data, default_name)
    except AutomatonFormatError as e:
        e.path = e.path or path
        raise
    logger.info("loaded %s from %s (%d states)", a.name, path, len(a))
    return a


def _xml_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes")


def _attr_or_child(elem, *names) -> Optional[str]:
    # attributes are taken verbatim; child elements may be pretty-printed
    value = elem.attrib.get(names[0])
    if value is not None:
        return value
    for n in names:
        text = elem.findtext(n)
        if text is not None:
            return text.strip()
    return None


def parse_xml_automaton(path: str) -> Automaton:
    try:
        tree = ET.parse(path)
    except ET.ParseError as e:
        raise AutomatonFormatError(str(e), path) from e
    root = tree.getroot()

    def findall(elem, *names):
        for n in names:
            found = elem.findall(n)
            if found:
                return found
        return []

    def findone(elem, *names):
        for n in names:
            f = elem.find(n)
            if f is not None:
                return f
        return None

    name = root.attrib.get("name") or os.path.splitext(os.path.basename(path))[0]
    kind = _parse_kind(root.attrib.get("kind"))

    start_node = findone(root, "start", "Start")
    start_state = start_node.text if start_node is not None and start_node.text else None
    accept_nodes = findall(root, "accept/state", "Accept/State", "finals/state")
    accept_states = {n.text for n in accept_nodes if n.text}

    states: Dict[str, State] = {}
    for n in findall(root, "states/state", "States/State", "stateSet/state"):
        if not n.text:
            continue
        s = n.text
        states[s] = State(
            s,
            is_start=_xml_bool(n.get("start")) or s == start_state,
            is_final=_xml_bool(n.get("final")) or s in accept_states,
        )

    alpha_nodes = findall(root, "alphabet/symbol", "Alphabet/Symbol", "alphabet/char", "Alphabet/Char")
    alphabet = {n.text for n in alpha_nodes if n is not None and n.text}

    t_nodes = findall(root, "transitions/t", "Transitions/T", "transitions/transition", "Transitions/Transition")
    for t in t_nodes:
        frm = _attr_or_child(t, "from", "From")
        sym = _attr_or_child(t, "symbol", "Symbol")
        to = _attr_or_child(t, "to", "To")
        if frm is None or to is None:
            raise AutomatonFormatError("transition without 'from' or 'to'", path)
        for s in (frm, to):
            if s not in states:
                states[s] = State(s, is_start=(s == start_state), is_final=(s in accept_states))
        states[frm].out.append(
            Transition(frm, to, normalize_symbol(sym or ""), _parse_payload(kind, t.attrib))
        )

    if start_state is not None and start_state not in states:
        states[start_state] = State(start_state, is_start=True, is_final=start_state in accept_states)

    a = Automaton(states.values(), name=name, kind=kind, alphabet=alphabet)
    a.validate()
    logger.info("loaded %s from %s (%d states)", a.name, path, len(a))
    return a


def automaton_to_json_dict(a: Automaton) -> dict:
    return {
        "name": a.name,
        "kind": a.kind.value,
        "alphabet": sorted(a.declared_alphabet),
        "is_dfa": a.is_deterministic(),
        "states": [
            {
                "name": s.name,
                "is_start": s.is_start,
                "is_final": s.is_final,
                "out": [
                    {"to": t.target, "symbol": t.symbol, **_payload_fields(t.payload)}
                    for t in s.out
                ],
            }
            for s in a.states.values()
        ],
    }


def automaton_to_xml_element(a: Automaton) -> ET.Element:
    root = ET.Element("automaton", attrib={"name": a.name, "kind": a.kind.value})
    alpha_el = ET.SubElement(root, "alphabet")
    for sym in sorted(a.declared_alphabet):
        ET.SubElement(alpha_el, "symbol").text = sym
    states_el = ET.SubElement(root, "states")
    for s in a.states.values():
        state_el = ET.SubElement(states_el, "state")
        state_el.text = s.name
        if s.is_start:
            state_el.set("start", "true")
        if s.is_final:
            state_el.set("final", "true")
    trans_el = ET.SubElement(root, "transitions")
    for t in a.transitions():
        ET.SubElement(
            trans_el,
            "t",
            attrib={"from": t.source, "symbol": t.symbol, "to": t.target, **_payload_fields(t.payload)},
        )
    return root


def read_automaton(path: str, fmt: Optional[str] = None) -> Automaton:
    fmt = fmt or detect_format_from_ext(path)
    if fmt == "json":
        return parse_json_automaton(path)
    elif fmt == "xml":
        return parse_xml_automaton(path)
    else:
        raise ValueError(f"Unsupported format: {fmt}")


def write_automaton(a: Automaton, path: str, fmt: Optional[str] = None) -> None:
    fmt = fmt or detect_format_from_ext(path)
    dirname = os.path.dirname(path)
    if dirname:
        os.makedirs(dirname, exist_ok=True)
    if fmt == "json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump(automaton_to_json_dict(a), f, ensure_ascii=False, indent=2)
    elif fmt == "xml":
        tree = ET.ElementTree(automaton_to_xml_element(a))
        ET.indent(tree)
        tree.write(path, encoding="utf-8", xml_declaration=True)
    else:
        raise ValueError(f"Unsupported format: {fmt}")
    logger.info("wrote %s to %s (%s)", a.name, path, fmt)
