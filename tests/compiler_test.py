import pytest

from compiler import Compiler
from errors import CompileError
from ast_nodes import (
    Program, Number, StringLiteral, BinOp, If, While, VarDecl, VarAssign, VarRef, Block,
    ArrayLiteral, ArrayIndex, ArrayAssign,
)


def compile_node(node):
    return Compiler().compile_node(node).instructions


def test_literals_push_a_single_value():
    assert compile_node(Number(5)) == [("PUSH", 5)]
    assert compile_node(StringLiteral("hi")) == [("PUSH", "hi")]


def test_binop_compiles_left_then_right_then_opcode():
    code = compile_node(BinOp(Number(10), "-", Number(3)))
    assert code == [("PUSH", 10), ("PUSH", 3), ("SUB", None)]


def test_every_operator_maps_to_an_opcode():
    expected = {
        "+": "ADD", "-": "SUB", "*": "MUL", "/": "DIV",
        ">": "GREATER", "<": "LESS", "==": "EQUAL", "!=": "NOT_EQUAL",
    }
    for op, opcode in expected.items():
        assert compile_node(BinOp(Number(1), op, Number(2)))[-1] == (opcode, None)


def test_unsupported_operator_is_rejected():
    with pytest.raises(CompileError):
        compile_node(BinOp(Number(1), "%", Number(2)))


def test_if_else_layout():
    node = If(BinOp(Number(3), ">", Number(2)), [Number(1)], [Number(2)])
    assert compile_node(node) == [
        ("PUSH", 3),
        ("PUSH", 2),
        ("GREATER", None),
        ("JZ", 6),
        ("PUSH", 1),
        ("JMP", 7),
        ("PUSH", 2),
    ]


def test_if_without_else_still_jumps_past_empty_branch():
    node = If(VarRef("x"), [Number(1)])
    assert compile_node(node) == [
        ("LOAD", "x"),
        ("JZ", 4),
        ("PUSH", 1),
        ("JMP", 4),
    ]


def test_while_back_patches_exit():
    node = While(
        BinOp(VarRef("i"), "<", Number(5)),
        [VarAssign("i", BinOp(VarRef("i"), "+", Number(1)))],
    )
    assert compile_node(node) == [
        ("LOAD", "i"),
        ("PUSH", 5),
        ("LESS", None),
        ("JZ", 9),
        ("LOAD", "i"),
        ("PUSH", 1),
        ("ADD", None),
        ("STORE", "i"),
        ("JMP", 0),
    ]


def test_nested_jumps_are_relocated():
    inner = While(VarRef("w"), [VarAssign("w", Number(0))])
    node = If(VarRef("c"), [inner])
    assert compile_node(node) == [
        ("LOAD", "c"),
        ("JZ", 8),
        ("LOAD", "w"),
        ("JZ", 7),
        ("PUSH", 0),
        ("STORE", "w"),
        ("JMP", 2),
        ("JMP", 8),
    ]


def test_program_offsets_later_statements():
    loop = While(
        BinOp(VarRef("i"), "<", Number(5)),
        [VarAssign("i", BinOp(VarRef("i"), "+", Number(1)))],
    )
    bc = Compiler().compile(Program([VarDecl("i", Number(0)), loop]))
    assert bc.instructions[:2] == [("PUSH", 0), ("STORE", "i")]
    assert bc.instructions[5] == ("JZ", 11)
    assert bc.instructions[10] == ("JMP", 2)
    assert bc.instructions[-1] == ("LABEL", "end")
    assert len(bc) == 12


def test_program_accepts_plain_statement_list():
    bc = Compiler().compile([Number(1), Number(2)])
    assert bc.instructions == [("PUSH", 1), ("PUSH", 2), ("LABEL", "end")]


def test_jump_to_end_of_program_stays_in_range():
    bc = Compiler().compile([If(Number(0), [Number(1)])])
    assert bc.jump_targets() == [4, 4]
    assert all(target < len(bc) for target in bc.jump_targets())


def test_block_is_wrapped_in_scope():
    code = compile_node(Block([VarDecl("y", Number(5))]))
    assert code == [("BEGIN_SCOPE", None), ("PUSH", 5), ("STORE", "y"), ("END_SCOPE", None)]


def test_decl_and_assign_compile_identically():
    assert compile_node(VarDecl("x", Number(1))) == compile_node(VarAssign("x", Number(1)))


def test_array_literal():
    code = compile_node(ArrayLiteral([Number(1), Number(2)]))
    assert code == [
        ("CREATE_ARRAY", None),
        ("PUSH", 1),
        ("ARRAY_OP", "PUSH"),
        ("PUSH", 2),
        ("ARRAY_OP", "PUSH"),
    ]


def test_array_index():
    code = compile_node(ArrayIndex(VarRef("x"), Number(0)))
    assert code == [("LOAD", "x"), ("PUSH", 0), ("ARRAY_OP", "GET")]


def test_array_assign_rebinds_variable():
    code = compile_node(ArrayAssign(VarRef("x"), Number(0), Number(10)))
    assert code == [
        ("LOAD", "x"),
        ("PUSH", 0),
        ("PUSH", 10),
        ("ARRAY_OP", "SET"),
        ("STORE", "x"),
    ]


def test_array_assign_on_temporary_leaves_array_on_stack():
    code = compile_node(ArrayAssign(ArrayLiteral([]), Number(0), Number(10)))
    assert code[-1] == ("ARRAY_OP", "SET")


def test_number_literal_out_of_range():
    with pytest.raises(CompileError):
        compile_node(Number(2 ** 31))


def test_unknown_node():
    class Mystery:
        pass

    with pytest.raises(CompileError):
        compile_node(Mystery())


def test_debug_info_follows_node_lines():
    node = VarDecl("x", Number(1))
    node.line = 3
    bc = Compiler(source_path="prog.pbl").compile([node])
    assert bc.debug[1] == {"file": "prog.pbl", "line": 3}
    # the literal itself had no line
    assert bc.debug[0] == {"file": "prog.pbl"}
