import argparse
import logging
import os
import sys

from automata_editor.automaton import EMPTY_SYMBOL, Automaton, alphabet, find_start
from automata_editor.conversion import DEFAULT_MAX_STATES, nfa_to_dfa
from automata_editor.exceptions import AutomatonError, NoStartState
from automata_editor.parsing import detect_format_from_ext, read_automaton, write_automaton
from automata_editor.simulation import accepts

logger = logging.getLogger(__name__)


def build_arg_parser():
    p = argparse.ArgumentParser(
        prog="automata-editor",
        description="Run input strings through an automaton (JSON/XML) and convert it to a DFA.",
    )
    p.add_argument("input", help="Input file (.json or .xml) with an automaton (ε allowed)")
    p.add_argument("-o", "--output", help="Output file (.json or .xml) for the converted DFA")
    p.add_argument("--in-format", choices=["json", "xml"], help="Force input format (auto by extension)")
    p.add_argument("--out-format", choices=["json", "xml"], help="Force output format (auto by extension)")
    p.add_argument("--to-dfa", action="store_true", help="Convert to a DFA by subset construction")
    p.add_argument("--name", help="Name of the output automaton")
    p.add_argument(
        "--accept",
        action="append",
        default=[],
        metavar="STRING",
        help="Report whether STRING is accepted (repeatable)",
    )
    p.add_argument(
        "--max-states",
        type=int,
        default=DEFAULT_MAX_STATES,
        help=f"Ceiling on DFA states during conversion, 0 for none (default: {DEFAULT_MAX_STATES})",
    )
    p.add_argument("--plot", metavar="IMAGE", help="Render the resulting automaton to an image file")
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    return p


def describe(a: Automaton) -> None:
    stats = a.get_stats()
    try:
        start = find_start(a)
    except NoStartState:
        start = "-"
    print(f"{a.name} ({a.kind.value})")
    print(f"States: {stats['states']}, Alphabet: {sorted(alphabet(a))}, Start: {start}")
    print(f"Accepting: {[s.name for s in a.states.values() if s.is_final]}")
    print(f"Transitions: {stats['total_transitions']} (ε: {stats['epsilon_transitions']}), DFA: {stats['is_dfa']}")
    for t in a.transitions():
        print(f"  {t.source} --{t.symbol}--> {t.target}")


def run(args) -> int:
    a = read_automaton(args.input, args.in_format)
    describe(a)

    for string in args.accept:
        verdict = "accepted" if accepts(a, string) else "rejected"
        print(f"{string or EMPTY_SYMBOL}: {verdict}")

    out_auto = a
    if args.to_dfa:
        out_auto = nfa_to_dfa(a, max_states=args.max_states or None)
        print()
        describe(out_auto)
    if args.name:
        out_auto.name = args.name

    if args.output or args.to_dfa:
        out_path = args.output
        if not out_path:
            base, ext = os.path.splitext(args.input)
            chosen_ext = args.out_format or (ext.lstrip(".") if ext else "json")
            out_path = f"{base}_dfa.{chosen_ext}"
        out_fmt = args.out_format or detect_format_from_ext(out_path)
        write_automaton(out_auto, out_path, out_fmt)
        print(f"\nInput: {args.input}  ->  Output: {out_path} ({out_fmt})")

    if args.plot:
        from automata_editor.visualization import save_plot

        save_plot(out_auto, args.plot)
        print(f"Plot: {args.plot}")

    return 0


def main(argv=None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s: %(message)s",
    )
    try:
        return run(args)
    except (AutomatonError, OSError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
