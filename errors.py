import os


class PebbleError(Exception):
    pass


class TokenizeError(PebbleError):
    def __init__(self, message: str, line: int, column: int):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        return f"Tokenization error at line {self.line}:{self.column} - {self.message}"


class ParseError(PebbleError):
    def __init__(self, message: str, line: int, column: int):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        return f"Parse error at line {self.line}:{self.column} - {self.message}"


class CompileError(PebbleError):
    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.message = message
        self.line = line

    def __str__(self) -> str:
        if self.line is None:
            return f"Compile error: {self.message}"
        return f"Compile error at line {self.line}: {self.message}"


class PebbleRuntimeError(PebbleError):
    kind = "Runtime error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        # filled in by the VM when the error escapes an instruction
        self.ip = None
        self.line = None
        self.file = None

    def format(self, indent: str = "") -> str:
        lines = [f"{indent}{self.kind}: {self.message}"]
        if self.ip is not None:
            if self.line is None:
                lines.append(f"{indent}  at ip={self.ip:04d}")
            else:
                file_short = os.path.basename(self.file) if self.file else "<unknown>"
                lines.append(f"{indent}  at {file_short}:{self.line} (ip={self.ip:04d})")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()


class PebbleTypeError(PebbleRuntimeError):
    kind = "Type error"


class DivisionByZeroError(PebbleRuntimeError):
    kind = "Division by zero"

    def __init__(self):
        super().__init__("right-hand operand of '/' is zero")


class IntegerOverflowError(PebbleRuntimeError):
    kind = "Integer overflow"

    def __init__(self, value: int):
        super().__init__(f"{value} does not fit in a 32-bit signed integer")
        self.value = value


class ArrayIndexError(PebbleRuntimeError):
    kind = "Index error"

    def __init__(self, index: int, length: int):
        if length == 0 and index == -1:
            message = "pop from empty array"
        else:
            message = f"index {index} out of range for array of length {length}"
        super().__init__(message)
        self.index = index
        self.length = length


class NotAnArrayError(PebbleRuntimeError):
    kind = "Not an array"

    def __init__(self, got: str):
        super().__init__(f"array operation applied to {got}")
        self.got = got


class UndefinedVariableError(PebbleRuntimeError):
    kind = "Undefined variable"

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class StackUnderflowError(PebbleRuntimeError):
    kind = "Stack underflow"

    def __init__(self):
        super().__init__("operand stack is empty")


class StackOverflowError(PebbleRuntimeError):
    kind = "Stack overflow"

    def __init__(self, limit: int):
        super().__init__(f"operand stack exceeded {limit} values")
        self.limit = limit


class NoScopeToEndError(PebbleRuntimeError):
    kind = "No scope to end"

    def __init__(self):
        super().__init__("END_SCOPE without a matching BEGIN_SCOPE")


class InvalidJumpError(PebbleRuntimeError):
    kind = "Invalid jump"

    def __init__(self, target, max_target: int):
        super().__init__(f"target {target} outside 0..{max_target - 1}")
        self.target = target
        self.max = max_target


class ExecutionError(PebbleRuntimeError):
    kind = "Execution error"
