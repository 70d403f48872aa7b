#!/usr/bin/env python3

import argparse
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from .grammar import Grammar, BadGrammarError, first, follow, firstPlus, disjoint, showMappings, checkFirstPlus, formatSet, formatSets
from .codegen import EMITTERS, generateParser, generatePrototypes
from .source import readGrammar

log = logging.getLogger(__name__)

GREEN = "\033[0;32m"
RED   = "\033[0;31m"
RESET = "\033[0m"

@dataclass
class Args:
    filename: str
    key: str = None
    first: bool = False
    follow: bool = False
    firstPlus: bool = False
    checkFirstPlus: bool = False
    showMappings: bool = False
    parser: bool = False
    target: str = "cpp"
    output: str = None
    protos: str = None
    color: bool = True
    verbose: bool = False

def buildArgParser():
    parser = argparse.ArgumentParser(
        prog="grammar-checker",
        description="Computes FIRST, FOLLOW and FIRST+ sets of a BNF grammar, checks it is LL(1) "
                    "and generates a recursive-descent parser skeleton",
    )
    parser.add_argument("--filename", required=True, help="Grammar file to read")
    parser.add_argument("--key", help="Symbol(s) to query: a name, a comma separated list, or 'all'")
    parser.add_argument("--first", action="store_true", help="Print the FIRST set of each key")
    parser.add_argument("--follow", action="store_true", help="Print the FOLLOW set of each key")
    parser.add_argument("--first_plus", action="store_true", dest="firstPlus",
                        help="Print the FIRST+ sets of each key, colored by disjointness")
    parser.add_argument("--check_first_plus", action="store_true", dest="checkFirstPlus",
                        help="Check every rule's FIRST+ sets are disjoint (LL(1))")
    parser.add_argument("--show_mappings", action="store_true", dest="showMappings",
                        help="Print each FIRST+ set next to the production it selects")
    parser.add_argument("--parser", action="store_true", help="Generate a parser skeleton")
    parser.add_argument("--target", choices=sorted(EMITTERS), default="cpp",
                        help="Language of the generated parser skeleton")
    parser.add_argument("--output", metavar="PATH", help="Write the parser skeleton to PATH instead of stdout")
    parser.add_argument("--protos", metavar="PATH", help="Write procedure prototypes to a new file at PATH")
    parser.add_argument("--no-color", action="store_false", dest="color", help="Disable colored output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be verbose")
    return parser

def parseArgs(argv=None) -> Args:
    return Args(**vars(buildArgParser().parse_args(argv)))

# Output
# ######

class Printer:
    def __init__(self, out, color):
        self.out = out
        self.color = color

    def line(self, text=""):
        print(text, file=self.out)

    def status(self, text, ok):
        if self.color:
            text = f"{GREEN if ok else RED}{text}{RESET}"
        self.line(text)

def resolveKeys(key: str, grammar: Grammar) -> list[str]:
    if key == "all":
        return [ r.nonTerm for r in grammar.rules ]
    return [ k.strip() for k in key.split(",") if k.strip() ]

def reportKey(key, grammar, args, printer):
    if args.first:
        printer.line(f"first({key}) = {formatSet(first(key, grammar))}")
    if args.follow:
        printer.line(f"follow({key}) = {formatSet(follow(key, grammar))}")
    if args.firstPlus:
        sets = firstPlus(key, grammar)
        printer.status(f"first_plus({key}) = {formatSets(sets)}", disjoint(sets))
    if args.showMappings:
        printer.status(key, True)
        if grammar.isTerminal(key):
            printer.line("This is a terminal node.")
        for sel, prod in showMappings(key, grammar):
            printer.line(f"{formatSet(sel)} => {prod!r}")

def writeNew(path, text):
    with open(path, "x", encoding="utf-8") as f:
        f.write(text)

def run(args: Args, out=None) -> int:
    out = out or sys.stdout
    printer = Printer(out, args.color and out.isatty())
    grammar = readGrammar(args.filename)
    log.info("loaded %d rule(s) from %s", len(grammar), args.filename)

    if args.checkFirstPlus:
        reports = checkFirstPlus(grammar)
        for report in reports:
            printer.status(repr(report), report.disjoint)
        failed = [ r.nonTerm for r in reports if not r.disjoint ]
        if failed:
            printer.status(f"grammar is not LL(1): {', '.join(failed)}", False)
        else:
            printer.status("grammar is LL(1)", True)

    if args.key:
        for key in resolveKeys(args.key, grammar):
            reportKey(key, grammar, args, printer)

    if args.parser:
        code = generateParser(grammar, args.target)
        if args.output:
            Path(args.output).write_text(code, encoding="utf-8")
            log.info("wrote %s parser skeleton to %s", args.target, args.output)
        else:
            printer.line(code)

    if args.protos:
        writeNew(args.protos, generatePrototypes(grammar))
        log.info("wrote prototypes to %s", args.protos)

    return 0

def main(argv=None) -> int:
    args = parseArgs(argv)
    logging.basicConfig(stream=sys.stderr, level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        return run(args)
    except BadGrammarError as e:
        print(f"error: malformed grammar: {e}", file=sys.stderr)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
    except OSError as e:
        print(f"error: {e}", file=sys.stderr)
    return 1

if __name__ == "__main__":
    sys.exit(main())
