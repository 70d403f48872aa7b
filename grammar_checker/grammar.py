#!/usr/bin/env python3

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

EPSILON = "epsilon"
END     = "$"

RULE_SEP = "::="
ALT_TOKEN = "|"
ALT_SEP   = f" {ALT_TOKEN} "

class BadGrammarError(ValueError):
    """Raised when a grammar line cannot be turned into a rule."""

# Grammar Representation
# ######################

@dataclass(frozen=True)
class Production:
    output: tuple[str, ...]

    def __post_init__(self):
        if len(self.output) == 0: raise BadGrammarError("Production must contain at least one symbol")

    @classmethod
    def fromText(cls, text: str) -> "Production":
        return cls(tuple(text.split()))

    def __repr__(self):
        return " ".join(self.output)

    def __len__(self):
        return len(self.output)

    def __getitem__(self, idx):
        return self.output[idx]

    def __iter__(self):
        return iter(self.output)

@dataclass(frozen=True)
class Rule:
    nonTerm: str
    derivations: tuple[Production, ...]
    line: str = field(default="", compare=False)

    def __post_init__(self):
        if len(self.derivations) == 0: raise BadGrammarError(f"Rule {self.nonTerm} has no alternatives")

    @classmethod
    def fromLine(cls, line: str) -> "Rule":
        """
        Parse one logical grammar line of the form ``LHS ::= ALT1 | ALT2``.
        The right-hand side is split on whitespace and the tokens are grouped
        into alternatives at each ``|`` token.
        """
        lhs, sep, rhs = line.partition(RULE_SEP)
        if not sep:
            raise BadGrammarError(f"Missing '{RULE_SEP}' in grammar line: {line!r}")

        lhs, rhs = lhs.strip(), rhs.strip()
        if not lhs or len(lhs.split()) != 1:
            raise BadGrammarError(f"Expected a single non-terminal before '{RULE_SEP}': {line!r}")
        if not rhs:
            raise BadGrammarError(f"No alternatives for {lhs}: {line!r}")

        prods, group = [], []
        for tok in rhs.split() + [ ALT_TOKEN ]:
            if tok != ALT_TOKEN:
                group.append(tok)
                continue
            if not group:
                raise BadGrammarError(f"Empty alternative for {lhs}: {line!r}")
            prods.append(Production.fromText(" ".join(group)))
            group = []

        log.debug("rule %s with %d alternative(s)", lhs, len(prods))
        return cls(lhs, tuple(prods), line)

    def __repr__(self):
        return f"{self.nonTerm} {RULE_SEP} " + ALT_SEP.join(repr(p) for p in self.derivations)

    def __len__(self):
        return len(self.derivations)

@dataclass(frozen=True)
class Grammar:
    rules: tuple[Rule, ...]

    @classmethod
    def fromLines(cls, lines: Iterable[str]) -> "Grammar":
        return cls(tuple(Rule.fromLine(line) for line in lines))

    @classmethod
    def fromText(cls, text: str) -> "Grammar":
        from .source import getFileLines, joinLines
        return cls.fromLines(joinLines(getFileLines(text)))

    def __repr__(self):
        res = "Grammar(\n"
        for rule in self.rules:
            res += "  " + repr(rule) + "\n"
        res += ")"
        return res

    def __iter__(self):
        return iter(self.rules)

    def __len__(self):
        return len(self.rules)

    def __getitem__(self, nonTerm):
        if not isinstance(nonTerm, str):
            raise ValueError("Grammar rule lookup must use a symbol string")
        return next((r for r in self.rules if r.nonTerm == nonTerm), None)

    def isTerminal(self, symbol: str) -> bool:
        return isTerminal(symbol, self)

    def isNonTerminal(self, symbol: str) -> bool:
        return not isTerminal(symbol, self)

    def symbols(self) -> list[str]:
        seen = []
        for rule in self.rules:
            for sym in (rule.nonTerm, *(s for p in rule.derivations for s in p)):
                if sym not in seen: seen.append(sym)
        return seen

    def nonTerminals(self) -> list[str]:
        return [ s for s in self.symbols() if self.isNonTerminal(s) ]

    def terminals(self) -> list[str]:
        return [ s for s in self.symbols() if self.isTerminal(s) ]

    def todict(self):
        # reversed so the first definition of a duplicated non-terminal wins
        return { rule.nonTerm: [ list(p.output) for p in rule.derivations ] for rule in reversed(self.rules) }

# symbol classification
# #####################

def isTerminal(symbol: str, grammar: Grammar) -> bool:
    return not any(r.nonTerm == symbol for r in grammar.rules)

def isNonTerminal(symbol: str, grammar: Grammar) -> bool:
    return not isTerminal(symbol, grammar)

# grammar prediction
# ##################

def first(symbol: str, grammar: Grammar) -> set[str]:
    """
    FIRST set of a single symbol. Only the leading symbol of every
    alternative is consulted, so a nullable leading non-terminal does not
    pull in the FIRST set of the symbol after it.
    """
    if isTerminal(symbol, grammar):
        return { symbol }

    firstSet = set()
    for prod in grammar[symbol].derivations:
        firstSet.update(first(prod[0], grammar))
    return firstSet

def occurrences(symbol: str, grammar: Grammar) -> list[tuple[str, Production, int]]:
    return [ (rule.nonTerm, prod, pos)
             for rule in grammar.rules
             for prod in rule.derivations
             for pos, sym in enumerate(prod) if sym == symbol ]

def _followOwner(symbol, owner, grammar, stack):
    stack.append(symbol)
    try:
        return follow(owner, grammar, stack)
    finally:
        stack.pop()

def follow(symbol: str, grammar: Grammar, stack: list[str] = None) -> set[str]:
    """
    FOLLOW set of a symbol.

    ``stack`` holds the symbols whose FOLLOW computation is in progress on
    the current call chain; reaching one of them again yields nothing.
    Every call leaves ``stack`` as it found it.
    """
    if stack is None: stack = []
    followSet = set()

    if symbol in stack:
        log.debug("follow(%s): cycle through %s", symbol, stack)
        return followSet

    found = occurrences(symbol, grammar)
    for owner, prod, pos in found:
        if pos + 1 == len(prod):
            if owner != symbol:
                followSet.update(_followOwner(symbol, owner, grammar, stack))
            continue

        nextFirst = first(prod[pos + 1], grammar)
        followSet.update(nextFirst - { EPSILON })
        if EPSILON in nextFirst:
            followSet.update(_followOwner(symbol, owner, grammar, stack))

    # never on a right-hand side, so this is the start symbol
    if not found:
        followSet.add(END)

    return followSet

def firstPlus(symbol: str, grammar: Grammar) -> list[set[str]]:
    rule = grammar[symbol]
    if rule is None:
        return []

    sets = []
    for prod in rule.derivations:
        sel = first(prod[0], grammar)
        if EPSILON in sel:
            sel |= follow(symbol, grammar)
        sets.append(sel)
    return sets

def disjoint(sets: Iterable[set[str]]) -> bool:
    values = set()
    for st in sets:
        for val in st:
            if val in values: return False
            values.add(val)
    return True

def showMappings(symbol: str, grammar: Grammar) -> list[tuple[set[str], Production]]:
    rule = grammar[symbol]
    if rule is None:
        return []
    return list(zip(firstPlus(symbol, grammar), rule.derivations))

# LL(1) checking
# ##############

@dataclass(frozen=True)
class RuleReport:
    nonTerm: str
    sets: list[set[str]] = field(compare=False, hash=False)
    disjoint: bool

    def __repr__(self):
        return f"first_plus({self.nonTerm}) = {formatSets(self.sets)}"

def checkFirstPlus(grammar: Grammar) -> list[RuleReport]:
    reports = []
    for rule in grammar.rules:
        sets = firstPlus(rule.nonTerm, grammar)
        reports.append(RuleReport(rule.nonTerm, sets, disjoint(sets)))
        if not reports[-1].disjoint:
            log.debug("selection sets of %s overlap", rule.nonTerm)
    return reports

def isLL1(grammar: Grammar) -> bool:
    return all(r.disjoint for r in checkFirstPlus(grammar))

# formatting helpers
# ##################

def formatSet(st: Iterable[str]) -> str:
    return "{" + ", ".join(repr(s) for s in sorted(st)) + "}"

def formatSets(sets: Iterable[Iterable[str]]) -> str:
    return "[" + ", ".join(formatSet(s) for s in sets) + "]"
