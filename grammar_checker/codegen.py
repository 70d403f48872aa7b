#!/usr/bin/env python3

import logging
import re
from dataclasses import dataclass, asdict
from enum import Enum
from .grammar import Grammar, firstPlus

log = logging.getLogger(__name__)

# Parser Skeleton Representation
# ##############################

class StepKind(str, Enum):
    MATCH = "match"
    CALL  = "call"

@dataclass(frozen=True)
class Step:
    kind: StepKind
    symbol: str

@dataclass(frozen=True)
class Alternative:
    lookahead: frozenset[str]
    steps: tuple[Step, ...]

@dataclass(frozen=True)
class Procedure:
    nonTerm: str
    alternatives: tuple[Alternative, ...]

    @property
    def name(self):
        return procName(self.nonTerm)

    def todict(self):
        return asdict(self)

def procName(nonTerm: str) -> str:
    return "parse_" + re.sub(r"\W", "_", nonTerm.replace("'", "_prime"))

def buildProcedure(nonTerm: str, grammar: Grammar) -> Procedure:
    alts = []
    for sel, prod in zip(firstPlus(nonTerm, grammar), grammar[nonTerm].derivations):
        steps = tuple(Step(StepKind.MATCH if grammar.isTerminal(s) else StepKind.CALL, s) for s in prod)
        alts.append(Alternative(frozenset(sel), steps))
    return Procedure(nonTerm, tuple(alts))

def buildParser(grammar: Grammar) -> list[Procedure]:
    procs, owners = [], {}
    for nt in grammar.nonTerminals():
        proc = buildProcedure(nt, grammar)
        if proc.name in owners:
            raise ValueError(f"Non-terminals {owners[proc.name]!r} and {nt!r} both map to procedure {proc.name}")
        owners[proc.name] = nt
        procs.append(proc)
    return procs

# Emitters
# ########

class Emitter:
    """
    Turns skeleton procedures into source text. Subclasses supply the
    syntax for the pieces of one predictive-parsing procedure.
    """
    indent = "    "

    def emit(self, procedures: list[Procedure]) -> str:
        return "\n".join(self.emitProcedure(proc) for proc in procedures)

    def emitProcedure(self, proc: Procedure) -> str:
        log.debug("emitting %s with %d alternative(s)", proc.name, len(proc.alternatives))
        lines = self.header(proc)
        for i, alt in enumerate(proc.alternatives):
            lines.append(self.indent + self.guard(i > 0, sorted(alt.lookahead)))
            for step in alt.steps:
                body = self.match(step.symbol) if step.kind == StepKind.MATCH else self.call(proc, step.symbol)
                lines.extend(self.indent * 2 + line for line in body)
            lines.extend(self.indent + line for line in self.close())
        lines.extend(self.indent + line for line in self.failure(proc))
        lines.extend(self.footer(proc))
        return "\n".join(lines) + "\n"

    def header(self, proc): raise NotImplementedError()
    def guard(self, chained, lookahead): raise NotImplementedError()
    def match(self, symbol): raise NotImplementedError()
    def call(self, proc, symbol): raise NotImplementedError()
    def close(self): return []
    def failure(self, proc): raise NotImplementedError()
    def footer(self, proc): return []

def cppString(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'

class CppEmitter(Emitter):
    indent = "\t"

    def header(self, proc):
        return [ f"void {proc.name}() {{",
                 f'\tstd::cout << "Calling {proc.name}" << std::endl;' ]

    def guard(self, chained, lookahead):
        options = ", ".join(cppString(s) for s in lookahead)
        return f"{'else ' if chained else ''}if (match({{{options}}})) {{"

    def match(self, symbol):
        return [ f"match_terminal({cppString(symbol)});" ]

    def call(self, proc, symbol):
        return [ f"{procName(symbol)}();",
                 f'std::cout << "Returned to {proc.name}" << std::endl;' ]

    def close(self):
        return [ "}" ]

    def failure(self, proc):
        return [ "else {",
                 f'\tstd::cout << "Error in {proc.name}" << std::endl;',
                 "\texit(1);",
                 "}" ]

    def footer(self, proc):
        return [ "}" ]

class PythonEmitter(Emitter):

    def header(self, proc):
        return [ f"def {proc.name}(parser):" ]

    def guard(self, chained, lookahead):
        options = "{" + ", ".join(repr(s) for s in lookahead) + "}" if lookahead else "set()"
        return f"{'elif' if chained else 'if'} parser.peek() in {options}:"

    def match(self, symbol):
        return [ f"parser.match({symbol!r})" ]

    def call(self, proc, symbol):
        return [ f"{procName(symbol)}(parser)" ]

    def failure(self, proc):
        return [ "else:",
                 f"{self.indent}raise SyntaxError({'Error in ' + proc.name!r})" ]

EMITTERS = { "cpp": CppEmitter, "python": PythonEmitter }

def generateParser(grammar: Grammar, target: str = "cpp") -> str:
    if target not in EMITTERS:
        raise ValueError(f"Unknown parser target {target!r}; expected one of {', '.join(EMITTERS)}")
    return EMITTERS[target]().emit(buildParser(grammar))

def generatePrototypes(grammar: Grammar) -> str:
    out = ""
    for rule in grammar.rules:
        out += f"// {rule.line or repr(rule)}\nvoid {procName(rule.nonTerm)}();\n\n"
    return out
