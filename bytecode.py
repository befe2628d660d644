from values import format_value


OPCODES = (
    "PUSH",          # arg: value
    "POP",
    "ADD",
    "SUB",
    "MUL",
    "DIV",
    "GREATER",
    "LESS",
    "EQUAL",
    "NOT_EQUAL",
    "JMP",           # arg: absolute target
    "JZ",            # arg: absolute target
    "LABEL",         # arg: name (no-op)
    "STORE",         # arg: variable name
    "LOAD",          # arg: variable name
    "BEGIN_SCOPE",
    "END_SCOPE",
    "CREATE_ARRAY",
    "ARRAY_OP",      # arg: one of ARRAY_OPS
)

JUMP_OPCODES = ("JMP", "JZ")

ARRAY_OPS = ("PUSH", "POP", "GET", "SET")


def format_instruction(instruction) -> str:
    opcode, arg = instruction
    if arg is None:
        return opcode
    if opcode == "PUSH":
        return f"{opcode} {format_value(arg)}"
    return f"{opcode} {arg}"


class BytecodeProgram:
    def __init__(self):
        self.instructions = []   # list of (OPCODE, arg)
        self.debug = []          # list of debug dicts (e.g. {"file": str, "line": int}) aligned with instructions

    def __len__(self):
        return len(self.instructions)

    def __iter__(self):
        return iter(self.instructions)

    def emit(self, opcode, arg=None, debug=None):
        # returns instruction index (useful for jumps)
        self.instructions.append((opcode, arg))
        self.debug.append(debug)
        return len(self.instructions) - 1

    def patch(self, index, arg):
        opcode, _ = self.instructions[index]
        self.instructions[index] = (opcode, arg)

    def extend(self, other):
        # append a fragment whose jump targets are relative to its own start
        base = len(self.instructions)
        for opcode, arg in other.instructions:
            if opcode in JUMP_OPCODES:
                arg = arg + base
            self.instructions.append((opcode, arg))
        self.debug.extend(other.debug)
        return base

    def jump_targets(self):
        return [arg for opcode, arg in self.instructions if opcode in JUMP_OPCODES]

    def listing(self):
        lines = []
        for i, ins in enumerate(self.instructions):
            dbg = self.debug[i] or {}
            line = dbg.get("line")
            suffix = f"    ; line {line}" if line is not None else ""
            lines.append(f"{i:04d}  {format_instruction(ins)}{suffix}")
        return "\n".join(lines)
