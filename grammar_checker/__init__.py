from .grammar import (EPSILON, END, BadGrammarError, Production, Rule, Grammar, RuleReport,
                      isTerminal, isNonTerminal, first, follow, firstPlus, disjoint,
                      showMappings, checkFirstPlus, isLL1)
from .source import getFileLines, joinLines, readGrammar
from .codegen import Step, StepKind, Alternative, Procedure, buildParser, generateParser, generatePrototypes
