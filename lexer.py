from errors import TokenizeError


KEYWORDS = {
    "if": "IF",
    "else": "ELSE",
    "while": "WHILE",
}


def is_digit(ch):
    return ch is not None and "0" <= ch <= "9"


def is_ident_start(ch):
    # ASCII only; other letters are rejected as unexpected characters
    return ch is not None and ("a" <= ch <= "z" or "A" <= ch <= "Z" or ch == "_")


def is_ident_char(ch):
    return is_ident_start(ch) or is_digit(ch)


SINGLE_CHAR_TOKENS = {
    "+": "PLUS",
    "-": "MINUS",
    "*": "STAR",
    "/": "SLASH",
    ">": "GT",
    "<": "LT",
    "(": "LPAREN",
    ")": "RPAREN",
    "{": "LBRACE",
    "}": "RBRACE",
    "[": "LBRACKET",
    "]": "RBRACKET",
    ",": "COMMA",
    ";": "SEMI",
}


class Token:
    def __init__(self, type, value=None, line=1, column=1):
        self.type = type
        self.value = value
        self.line = line
        self.column = column

    def __repr__(self):
        if self.value is not None:
            return f"{self.type}({self.value})"
        return f"{self.type}"


class Lexer:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.current_char = text[0] if text else None
        self.line = 1
        self.column = 1

    def error(self, message, line=None, column=None):
        raise TokenizeError(message, line or self.line, column or self.column)

    def advance(self):
        # track line/column based on current_char before moving
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    def skip_whitespace(self):
        while self.current_char and self.current_char in " \t\r\n":
            self.advance()

    def skip_comment(self):
        while self.current_char and self.current_char != "\n":
            self.advance()

    def read_identifier(self):
        start_line, start_col = self.line, self.column
        result = ""
        while is_ident_char(self.current_char):
            result += self.current_char
            self.advance()
        if result in KEYWORDS:
            return Token(KEYWORDS[result], line=start_line, column=start_col)
        return Token("IDENT", result, line=start_line, column=start_col)

    def read_number(self):
        start_line, start_col = self.line, self.column
        result = ""
        while is_digit(self.current_char):
            result += self.current_char
            self.advance()
        # range is checked by the parser, which knows about a leading '-'
        return Token("NUMBER", int(result), line=start_line, column=start_col)

    def read_string(self):
        start_line, start_col = self.line, self.column
        self.advance()  # skip opening quote
        result = ""
        escapes = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}

        while self.current_char and self.current_char != '"':
            if self.current_char == "\\":
                self.advance()
                if self.current_char not in escapes:
                    self.error(f"Unknown escape sequence: \\{self.current_char or ''}")
                result += escapes[self.current_char]
                self.advance()
                continue
            if self.current_char == "\n":
                break
            result += self.current_char
            self.advance()

        if self.current_char != '"':
            self.error("Unclosed string", start_line, start_col)
        self.advance()  # skip closing quote
        return Token("STRING", result, line=start_line, column=start_col)

    def get_next_token(self):
        while self.current_char:
            if self.current_char in " \t\r\n":
                self.skip_whitespace()
                continue

            if self.current_char == "#":
                self.skip_comment()
                continue

            start_line, start_col = self.line, self.column

            if is_ident_start(self.current_char):
                return self.read_identifier()

            if is_digit(self.current_char):
                return self.read_number()

            if self.current_char == '"':
                return self.read_string()

            if self.current_char == "=":
                self.advance()
                if self.current_char == "=":
                    self.advance()
                    return Token("EQEQ", line=start_line, column=start_col)
                return Token("ASSIGN", line=start_line, column=start_col)

            if self.current_char == "!":
                if self.peek() == "=":
                    self.advance()
                    self.advance()
                    return Token("NOTEQ", line=start_line, column=start_col)
                self.error("Unexpected token: !")

            if self.current_char in SINGLE_CHAR_TOKENS:
                token_type = SINGLE_CHAR_TOKENS[self.current_char]
                self.advance()
                return Token(token_type, line=start_line, column=start_col)

            self.error(f"Unexpected character: {self.current_char}")

        return Token("EOF", line=self.line, column=self.column)

    def tokenize(self):
        tokens = []
        while True:
            token = self.get_next_token()
            tokens.append(token)
            if token.type == "EOF":
                return tokens
