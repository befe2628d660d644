class ASTNode:
    # Optional source line (1-based). Parser may set this.
    line: int | None = None


class Program(ASTNode):
    def __init__(self, statements):
        self.statements = statements


class Number(ASTNode):
    def __init__(self, value):
        self.value = value


class StringLiteral(ASTNode):
    def __init__(self, value):
        self.value = value


class BinOp(ASTNode):
    def __init__(self, left, op, right):
        self.left = left
        self.op = op              # "+", "-", "*", "/", ">", "<", "==", "!="
        self.right = right


class If(ASTNode):
    def __init__(self, condition, if_block, else_block=None):
        self.condition = condition
        self.if_block = if_block                  # list[stmt], runs in the enclosing scope
        self.else_block = else_block or []        # list[stmt]


class While(ASTNode):
    def __init__(self, condition, body):
        self.condition = condition
        self.body = body          # list[stmt], runs in the enclosing scope


class VarDecl(ASTNode):
    def __init__(self, name, value):
        self.name = name
        self.value = value


class VarAssign(ASTNode):
    def __init__(self, name, value):
        self.name = name
        self.value = value


class VarRef(ASTNode):
    def __init__(self, name):
        self.name = name


class Block(ASTNode):
    def __init__(self, statements):
        self.statements = statements


class ArrayLiteral(ASTNode):
    def __init__(self, elements):
        self.elements = elements  # list[expr]


class ArrayIndex(ASTNode):
    def __init__(self, array, index):
        self.array = array
        self.index = index


class ArrayAssign(ASTNode):
    def __init__(self, array, index, value):
        self.array = array
        self.index = index
        self.value = value
