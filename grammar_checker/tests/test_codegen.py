from pathlib import Path
import pytest
from deepdiff import DeepDiff
from grammar_checker.grammar import Grammar
from grammar_checker.source import readGrammar
from grammar_checker.codegen import *

EXPR = readGrammar(Path(__file__).parent / "expr.cfg")

G1 = Grammar.fromLines([ "list ::= item list' | epsilon",
                         "list' ::= , item list' | epsilon" ])

LIST_CPP = """\
void parse_list() {
\tstd::cout << "Calling parse_list" << std::endl;
\tif (match({"item"})) {
\t\tmatch_terminal("item");
\t\tparse_list_prime();
\t\tstd::cout << "Returned to parse_list" << std::endl;
\t}
\telse if (match({"$", "epsilon"})) {
\t\tmatch_terminal("epsilon");
\t}
\telse {
\t\tstd::cout << "Error in parse_list" << std::endl;
\t\texit(1);
\t}
}
"""

LIST_PYTHON = """\
def parse_list(parser):
    if parser.peek() in {'item'}:
        parser.match('item')
        parse_list_prime(parser)
    elif parser.peek() in {'$', 'epsilon'}:
        parser.match('epsilon')
    else:
        raise SyntaxError('Error in parse_list')
"""

def test_proc_name():
    assert procName("expr") == "parse_expr"
    assert procName("expr'") == "parse_expr_prime"
    assert procName("if-stmt") == "parse_if_stmt"

def test_build_procedure():
    expected = { "nonTerm": "factor",
                 "alternatives": ( { "lookahead": frozenset({ "(" }),
                                     "steps": ( { "kind": StepKind.MATCH, "symbol": "(" },
                                                { "kind": StepKind.CALL,  "symbol": "expr" },
                                                { "kind": StepKind.MATCH, "symbol": ")" } ) },
                                   { "lookahead": frozenset({ "num" }),
                                     "steps": ( { "kind": StepKind.MATCH, "symbol": "num" }, ) },
                                   { "lookahead": frozenset({ "name" }),
                                     "steps": ( { "kind": StepKind.MATCH, "symbol": "name" }, ) } ) }
    diff = DeepDiff(expected, buildProcedure("factor", EXPR).todict())
    assert len(diff) == 0, diff.pretty()

def test_build_parser_order():
    procs = buildParser(EXPR)
    assert [ p.nonTerm for p in procs ] == EXPR.nonTerminals()
    for proc in procs:
        assert len(proc.alternatives) == len(EXPR[proc.nonTerm].derivations)

def test_build_parser_epsilon_is_matched():
    proc = buildParser(EXPR)[3]
    assert proc.nonTerm == "expr'"
    assert proc.alternatives[2] == Alternative(frozenset({ "epsilon", "$", ")" }),
                                               (Step(StepKind.MATCH, "epsilon"),))

def test_cpp_emitter():
    assert CppEmitter().emitProcedure(buildProcedure("list", G1)) == LIST_CPP

def test_python_emitter():
    assert PythonEmitter().emitProcedure(buildProcedure("list", G1)) == LIST_PYTHON

@pytest.mark.parametrize("target", [ "cpp", "python" ])
def test_generate_parser(target):
    code = generateParser(EXPR, target)
    for nt in EXPR.nonTerminals():
        assert code.count(procName(nt) + "(") >= 1
    assert code.count("parse_expr_prime") >= 3

def test_generate_python_compiles():
    compile(generateParser(EXPR, "python"), "<skeleton>", "exec")

def test_generate_parser_default_is_cpp():
    assert generateParser(G1) == CppEmitter().emit(buildParser(G1))

def test_generate_parser_unknown_target():
    with pytest.raises(ValueError):
        generateParser(EXPR, "cobol")

def test_generate_prototypes():
    protos = generatePrototypes(EXPR)
    assert protos.startswith("// goal ::= expr\nvoid parse_goal();\n\n")
    assert "// expr' ::= + term expr' | - term expr' | epsilon\nvoid parse_expr_prime();\n\n" in protos
    assert protos.count("void parse_") == len(EXPR)

def test_build_parser_name_collision():
    g = Grammar.fromLines([ "S ::= a' a_prime",
                            "a' ::= x",
                            "a_prime ::= y" ])
    with pytest.raises(ValueError):
        buildParser(g)

def test_cpp_string_escapes_quotes():
    g = Grammar.fromLines([ 'S ::= "x" | a\\b' ])
    code = generateParser(g)
    assert 'match({"\\"x\\""})' in code
    assert 'match_terminal("\\"x\\"");' in code
    assert 'match_terminal("a\\\\b");' in code

def test_python_failure_raises():
    namespace = {}
    exec(generateParser(G1, "python"), namespace)

    class Tokens:
        def peek(self):
            return "unexpected"

    with pytest.raises(SyntaxError):
        namespace["parse_list"](Tokens())
