#!/usr/bin/env python3

import logging
from pathlib import Path
from .grammar import Grammar, BadGrammarError, RULE_SEP

log = logging.getLogger(__name__)

COMMENT_PREFIXES = ("//", "#", ";")

# Grammar File Preprocessing
# ##########################

def validLine(line: str) -> bool:
    return not (line == "" or line.startswith(COMMENT_PREFIXES))

def getFileLines(contents: str) -> list[str]:
    """
    Split grammar file contents into physical lines, dropping blank and
    comment lines and normalising double quotes to single quotes.
    """
    lines = []
    for line in contents.split("\n"):
        line = line.strip()
        if validLine(line):
            lines.append(line.replace('"', "'"))
    return lines

def joinLines(lines: list[str]) -> list[str]:
    """
    Join physical lines into one logical line per rule. A line containing
    ``::=`` starts a new rule; the lines after it continue that rule.
    """
    starts = [ i for i, line in enumerate(lines) if RULE_SEP in line ]
    if not starts:
        raise BadGrammarError("Grammar has no rules")
    if starts[0] != 0:
        raise BadGrammarError(f"Text before the first rule: {lines[0]!r}")

    ends = starts[1:] + [len(lines)]
    joined = [ " ".join(lines[i:j]) for i, j in zip(starts, ends) ]
    log.debug("joined %d line(s) into %d rule(s)", len(lines), len(joined))
    return joined

def readGrammar(path) -> Grammar:
    text = Path(path).read_text(encoding="utf-8")
    log.debug("read grammar from %s", path)
    return Grammar.fromText(text)
