from errors import ParseError
from values import INT_MIN, INT_MAX
from ast_nodes import (
    Program, Number, StringLiteral, BinOp, If, While, VarDecl, VarAssign, VarRef, Block,
    ArrayLiteral, ArrayIndex, ArrayAssign,
)


COMPARISON_OPS = {"GT": ">", "LT": "<", "EQEQ": "==", "NOTEQ": "!="}
ADDITIVE_OPS = {"PLUS": "+", "MINUS": "-"}
MULTIPLICATIVE_OPS = {"STAR": "*", "SLASH": "/"}


class Parser:
    def __init__(self, lexer):
        self.lexer = lexer
        self.current_token = self.lexer.get_next_token()
        self.next_token = self.lexer.get_next_token()
        # names assigned so far; the first assignment is a declaration
        self.declared = set()

    # move to next token, but only if it matches what we expect
    def eat(self, token_type):
        if self.current_token.type == token_type:
            self.current_token = self.next_token
            self.next_token = self.lexer.get_next_token()
        else:
            tok = self.current_token
            raise ParseError(f"Expected {token_type}, got {tok.type}", tok.line, tok.column)

    def error_here(self, message):
        tok = self.current_token
        raise ParseError(message, tok.line, tok.column)

    def skip_separators(self):
        while self.current_token.type == "SEMI":
            self.eat("SEMI")

    # ---------- TOP LEVEL ----------
    def parse(self):
        statements = []
        self.skip_separators()

        while self.current_token.type != "EOF":
            statements.append(self.statement())
            self.skip_separators()

        return Program(statements)

    # ---------- STATEMENTS ----------
    def statement(self):
        if self.current_token.type == "IF":
            return self.if_statement()

        if self.current_token.type == "WHILE":
            return self.while_statement()

        if self.current_token.type == "LBRACE":
            tok = self.current_token
            node = Block(self.body())
            node.line = tok.line
            return node

        if self.current_token.type == "IDENT" and self.next_token.type == "ASSIGN":
            return self.assignment()

        tok = self.current_token
        expr = self.comparison()

        # x[i] = value
        if self.current_token.type == "ASSIGN":
            if not isinstance(expr, ArrayIndex):
                self.error_here("Only variables and array elements can be assigned")
            if not isinstance(expr.array, VarRef):
                self.error_here("Only name[index] can be assigned")
            self.eat("ASSIGN")
            node = ArrayAssign(expr.array, expr.index, self.comparison())
            node.line = tok.line
            return node

        return expr

    def assignment(self):
        tok = self.current_token
        name = tok.value
        self.eat("IDENT")
        self.eat("ASSIGN")
        value = self.comparison()

        if name in self.declared:
            node = VarAssign(name, value)
        else:
            self.declared.add(name)
            node = VarDecl(name, value)
        node.line = tok.line
        return node

    def if_statement(self):
        tok = self.current_token
        self.eat("IF")
        condition = self.paren_condition()
        if_block = self.body()

        else_block = []
        if self.current_token.type == "ELSE":
            self.eat("ELSE")
            if self.current_token.type == "IF":
                # else if ... chains nest in the else branch
                else_block = [self.if_statement()]
            else:
                else_block = self.body()

        node = If(condition, if_block, else_block)
        node.line = tok.line
        return node

    def while_statement(self):
        tok = self.current_token
        self.eat("WHILE")
        condition = self.paren_condition()

        if self.current_token.type == "LBRACE":
            body = self.body()
        else:
            body = [self.statement()]

        node = While(condition, body)
        node.line = tok.line
        return node

    def paren_condition(self):
        self.eat("LPAREN")
        condition = self.comparison()
        self.eat("RPAREN")
        return condition

    def body(self):
        self.eat("LBRACE")
        statements = []
        self.skip_separators()
        while self.current_token.type != "RBRACE":
            if self.current_token.type == "EOF":
                self.error_here("Expected '}' before end of input")
            statements.append(self.statement())
            self.skip_separators()
        self.eat("RBRACE")
        return statements

    # ---------- EXPRESSIONS ----------
    def comparison(self):
        return self._binary_level(self.expr, COMPARISON_OPS)

    def expr(self):
        return self._binary_level(self.term, ADDITIVE_OPS)

    def term(self):
        return self._binary_level(self.factor, MULTIPLICATIVE_OPS)

    def _binary_level(self, operand, ops):
        node = operand()
        while self.current_token.type in ops:
            tok = self.current_token
            self.eat(tok.type)
            node = BinOp(node, ops[tok.type], operand())
            node.line = tok.line
        return node

    def factor(self):
        node = self.primary()
        while self.current_token.type == "LBRACKET":
            tok = self.current_token
            self.eat("LBRACKET")
            index = self.comparison()
            if self.current_token.type != "RBRACKET":
                self.error_here("Expected closing bracket ']'")
            self.eat("RBRACKET")
            node = ArrayIndex(node, index)
            node.line = tok.line
        return node

    def primary(self):
        tok = self.current_token

        if tok.type == "NUMBER":
            self.eat("NUMBER")
            return self.number(tok.value, tok)

        # negative literal: only directly in front of a number
        if tok.type == "MINUS" and self.next_token.type == "NUMBER":
            self.eat("MINUS")
            value = self.current_token.value
            self.eat("NUMBER")
            return self.number(-value, tok)

        if tok.type == "STRING":
            self.eat("STRING")
            node = StringLiteral(tok.value)
            node.line = tok.line
            return node

        if tok.type == "IDENT":
            self.eat("IDENT")
            node = VarRef(tok.value)
            node.line = tok.line
            return node

        if tok.type == "LPAREN":
            self.eat("LPAREN")
            node = self.comparison()
            self.eat("RPAREN")
            return node

        if tok.type == "LBRACKET":
            return self.array_literal()

        self.error_here("Expected number, string, identifier, '[' or '('")

    def number(self, value, tok):
        if value < INT_MIN or value > INT_MAX:
            raise ParseError(f"Number literal out of range: {value}", tok.line, tok.column)
        node = Number(value)
        node.line = tok.line
        return node

    def array_literal(self):
        tok = self.current_token
        self.eat("LBRACKET")
        elements = []

        if self.current_token.type != "RBRACKET":
            elements.append(self.comparison())
            while self.current_token.type == "COMMA":
                self.eat("COMMA")
                if self.current_token.type == "RBRACKET":
                    break  # trailing comma
                elements.append(self.comparison())

        if self.current_token.type != "RBRACKET":
            self.error_here("Expected closing bracket ']'")
        self.eat("RBRACKET")

        node = ArrayLiteral(elements)
        node.line = tok.line
        return node
