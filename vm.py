import values
from values import copy_value, format_value
from bytecode import format_instruction
from errors import (
    PebbleRuntimeError,
    ExecutionError,
    StackUnderflowError,
    StackOverflowError,
    UndefinedVariableError,
    NoScopeToEndError,
    InvalidJumpError,
)


BINARY_OPS = {
    "ADD": values.add,
    "SUB": values.sub,
    "MUL": values.mul,
    "DIV": values.div,
    "GREATER": values.gt,
    "LESS": values.lt,
    "EQUAL": values.eq,
    "NOT_EQUAL": lambda a, b: not values.eq(a, b),
}


class VM:
    def __init__(self, bytecode_program, max_stack_size: int = 4000, max_steps: int | None = None, trace: bool = False):
        self.instructions = list(bytecode_program)
        self.debug = getattr(bytecode_program, "debug", None) or [None] * len(self.instructions)

        self.max_stack_size = max_stack_size
        self.max_steps = max_steps  # set to an int to guard against infinite loops
        self.trace_enabled = trace

        self.ip = 0                 # instruction pointer (where we are)
        self.stack = []             # operand stack
        self.env_stack = [{}]       # scope frames, innermost last; [0] is the global frame
        self.scope_depth = 0        # BEGIN_SCOPE count not yet closed
        self.steps = 0

    @property
    def globals(self):
        return self.env_stack[0]

    def load_program(self, bytecode_program):
        # keep stack and global frame, replace the code (used by the REPL)
        self.instructions = list(bytecode_program)
        self.debug = getattr(bytecode_program, "debug", None) or [None] * len(self.instructions)
        self.ip = 0

    def unwind_scopes(self):
        # drop frames left open by a failed run; globals survive
        del self.env_stack[1:]
        self.scope_depth = 0

    def push(self, value):
        if len(self.stack) >= self.max_stack_size:
            raise StackOverflowError(self.max_stack_size)
        self.stack.append(value)

    def pop(self):
        if not self.stack:
            raise StackUnderflowError()
        return self.stack.pop()

    def check_jump(self, target):
        if not isinstance(target, int) or isinstance(target, bool):
            raise InvalidJumpError(target, len(self.instructions))
        if target < 0 or target >= len(self.instructions):
            raise InvalidJumpError(target, len(self.instructions))

    def lookup(self, name):
        for frame in reversed(self.env_stack):
            if name in frame:
                return frame[name]
        raise UndefinedVariableError(name)

    def _location_for_ip(self, ip: int):
        if ip < 0 or ip >= len(self.debug):
            return None, None
        dbg = self.debug[ip] or {}
        return dbg.get("file"), dbg.get("line")

    def step(self):
        opcode, arg = self.instructions[self.ip]

        if self.trace_enabled:
            print(f"TRACE ip={self.ip:04d} {format_instruction((opcode, arg))} stack={len(self.stack)}")

        if opcode == "PUSH":
            self.push(copy_value(arg))
            self.ip += 1
            return

        if opcode == "POP":
            self.pop()
            self.ip += 1
            return

        if opcode in BINARY_OPS:
            b = self.pop()
            a = self.pop()
            self.push(BINARY_OPS[opcode](a, b))
            self.ip += 1
            return

        if opcode == "JMP":
            self.check_jump(arg)
            self.ip = arg
            return

        if opcode == "JZ":
            self.check_jump(arg)
            condition = self.pop()
            if values.is_truthy(condition):
                self.ip += 1
            else:
                self.ip = arg
            return

        if opcode == "LABEL":
            self.ip += 1
            return

        if opcode == "STORE":
            self.env_stack[-1][arg] = self.pop()
            self.ip += 1
            return

        if opcode == "LOAD":
            self.push(copy_value(self.lookup(arg)))
            self.ip += 1
            return

        if opcode == "BEGIN_SCOPE":
            self.env_stack.append({})
            self.scope_depth += 1
            self.ip += 1
            return

        if opcode == "END_SCOPE":
            # the global frame is never popped
            if self.scope_depth == 0 or len(self.env_stack) <= 1:
                raise NoScopeToEndError()
            self.env_stack.pop()
            self.scope_depth -= 1
            self.ip += 1
            return

        if opcode == "CREATE_ARRAY":
            self.push([])
            self.ip += 1
            return

        if opcode == "ARRAY_OP":
            self.array_op(arg)
            self.ip += 1
            return

        raise ExecutionError(f"Unknown opcode: {opcode}")

    def array_op(self, op):
        if op == "PUSH":
            value = self.pop()
            target = self.pop()
            values.array_push(target, value)
            self.push(target)
        elif op == "POP":
            target = self.pop()
            value = values.array_pop(target)
            self.push(target)
            self.push(value)
        elif op == "GET":
            index = self.pop()
            target = self.pop()
            self.push(values.array_get(target, index))
        elif op == "SET":
            value = self.pop()
            index = self.pop()
            target = self.pop()
            values.array_set(target, index, value)
            self.push(target)
        else:
            raise ExecutionError(f"Unknown array operation: {op}")

    def run(self):
        try:
            while self.ip < len(self.instructions):
                if self.max_steps is not None:
                    self.steps += 1
                    if self.steps > self.max_steps:
                        raise ExecutionError("Step limit exceeded (possible infinite loop)")
                self.step()

            if self.scope_depth != 0:
                raise ExecutionError(f"Unclosed scopes at end of execution: {self.scope_depth}")
        except PebbleRuntimeError as e:
            if e.ip is None:
                e.ip = self.ip
                e.file, e.line = self._location_for_ip(self.ip)
            raise
        return self.stack

    def dump(self) -> str:
        lines = ["Stack: [" + ", ".join(format_value(v) for v in self.stack) + "]"]
        for name, value in self.globals.items():
            lines.append(f"  {name} = {format_value(value)}")
        return "\n".join(lines)
