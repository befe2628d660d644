from bytecode import BytecodeProgram
from errors import CompileError
from values import INT_MIN, INT_MAX
from ast_nodes import (
    Program, Number, StringLiteral, BinOp, If, While, VarDecl, VarAssign, VarRef, Block,
    ArrayLiteral, ArrayIndex, ArrayAssign,
)


class Compiler:
    """Compiles AST nodes to a flat instruction sequence.

    Every node compiles to its own fragment (a BytecodeProgram starting at
    index 0). Jump targets inside a fragment are absolute with respect to
    the fragment start; splicing a fragment into its parent with
    ``BytecodeProgram.extend`` shifts them by the splice offset, so targets
    stay absolute all the way up to the finished program.
    """

    def __init__(self, source_path: str | None = None):
        self.source_path = source_path

    def _debug_for(self, node):
        line = getattr(node, "line", None)
        if self.source_path is None and line is None:
            return None
        dbg = {}
        if self.source_path is not None:
            dbg["file"] = self.source_path
        if line is not None:
            dbg["line"] = line
        return dbg

    def emit(self, bc, opcode, arg=None, node=None):
        return bc.emit(opcode, arg, debug=self._debug_for(node))

    def compile(self, program):
        # entry point: Program node or a plain list of statements
        if isinstance(program, Program):
            statements = program.statements
        elif isinstance(program, (list, tuple)):
            statements = program
        else:
            raise CompileError(f"expected a Program or list of statements, got {program.__class__.__name__}")

        bc = self.compile_statements(statements)

        # A jump past the last statement lands here, so every target is a valid index.
        self.emit(bc, "LABEL", "end")
        return bc

    def compile_statements(self, statements):
        bc = BytecodeProgram()
        for stmt in statements:
            bc.extend(self.compile_node(stmt))
        return bc

    def compile_node(self, node):
        bc = BytecodeProgram()

        if isinstance(node, Number):
            value = node.value
            if isinstance(value, bool) or not isinstance(value, int):
                raise CompileError(f"number literal must be an integer, got {value!r}", node.line)
            if value < INT_MIN or value > INT_MAX:
                raise CompileError(f"number literal out of range: {value}", node.line)
            self.emit(bc, "PUSH", value, node)
            return bc

        if isinstance(node, StringLiteral):
            self.emit(bc, "PUSH", node.value, node)
            return bc

        if isinstance(node, BinOp):
            bc.extend(self.compile_node(node.left))
            bc.extend(self.compile_node(node.right))
            self.emit(bc, self.binary_op_to_opcode(node.op, node), node=node)
            return bc

        if isinstance(node, If):
            self.compile_if(bc, node)
            return bc

        if isinstance(node, While):
            self.compile_while(bc, node)
            return bc

        if isinstance(node, (VarDecl, VarAssign)):
            # declaration and reassignment are the same to the VM
            bc.extend(self.compile_node(node.value))
            self.emit(bc, "STORE", node.name, node)
            return bc

        if isinstance(node, VarRef):
            self.emit(bc, "LOAD", node.name, node)
            return bc

        if isinstance(node, Block):
            self.emit(bc, "BEGIN_SCOPE", node=node)
            bc.extend(self.compile_statements(node.statements))
            self.emit(bc, "END_SCOPE", node=node)
            return bc

        if isinstance(node, ArrayLiteral):
            self.emit(bc, "CREATE_ARRAY", node=node)
            for element in node.elements:
                bc.extend(self.compile_node(element))
                self.emit(bc, "ARRAY_OP", "PUSH", node)
            return bc

        if isinstance(node, ArrayIndex):
            bc.extend(self.compile_node(node.array))
            bc.extend(self.compile_node(node.index))
            self.emit(bc, "ARRAY_OP", "GET", node)
            return bc

        if isinstance(node, ArrayAssign):
            bc.extend(self.compile_node(node.array))
            bc.extend(self.compile_node(node.index))
            bc.extend(self.compile_node(node.value))
            self.emit(bc, "ARRAY_OP", "SET", node)
            # SET leaves the updated array on the stack; re-bind it when it came from a variable
            if isinstance(node.array, VarRef):
                self.emit(bc, "STORE", node.array.name, node)
            return bc

        raise CompileError(f"Unknown node: {node.__class__.__name__}", getattr(node, "line", None))

    def compile_if(self, bc, node):
        bc.extend(self.compile_node(node.condition))
        if_code = self.compile_statements(node.if_block)
        else_code = self.compile_statements(node.else_block)

        # +1 for the JZ itself, +1 for the JMP closing the if-branch
        else_start = len(bc) + 1 + len(if_code) + 1
        self.emit(bc, "JZ", else_start, node)
        bc.extend(if_code)

        after_else = else_start + len(else_code)
        self.emit(bc, "JMP", after_else, node)
        bc.extend(else_code)

    def compile_while(self, bc, node):
        condition_start = len(bc)
        bc.extend(self.compile_node(node.condition))

        jz_i = self.emit(bc, "JZ", None, node)

        body_code = self.compile_statements(node.body)
        bc.extend(body_code)
        self.emit(bc, "JMP", condition_start, node)

        # loop exit is only known once the body length is
        after_loop = jz_i + 1 + len(body_code) + 1
        bc.patch(jz_i, after_loop)

    def binary_op_to_opcode(self, op, node=None):
        mapping = {
            "+": "ADD",
            "-": "SUB",
            "*": "MUL",
            "/": "DIV",
            ">": "GREATER",
            "<": "LESS",
            "==": "EQUAL",
            "!=": "NOT_EQUAL",
        }
        if op not in mapping:
            raise CompileError(f"Unsupported operation: {op}", getattr(node, "line", None))
        return mapping[op]
