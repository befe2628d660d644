"""Runtime values and the operations the VM performs on them.

Values are plain Python objects tagged by type:

    number   int (signed 32-bit range)
    boolean  bool
    array    list
    null     None
    string   str (only ever produced by string literals)

bool is a subclass of int, so every dispatch checks it before int.
"""

from errors import (
    PebbleTypeError,
    DivisionByZeroError,
    IntegerOverflowError,
    ArrayIndexError,
    NotAnArrayError,
)


INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1


def type_name(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "number"
    if isinstance(value, list):
        return "array"
    if isinstance(value, str):
        return "string"
    raise PebbleTypeError(f"not a runtime value: {value!r}")


def is_number(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def make_number(n: int) -> int:
    if n < INT_MIN or n > INT_MAX:
        raise IntegerOverflowError(n)
    return n


def _require_numbers(op: str, a, b):
    if not (is_number(a) and is_number(b)):
        raise PebbleTypeError(f"cannot {op} {type_name(a)} and {type_name(b)}")


# -------- arithmetic --------
def add(a, b):
    _require_numbers("add", a, b)
    return make_number(a + b)


def sub(a, b):
    _require_numbers("subtract", a, b)
    return make_number(a - b)


def mul(a, b):
    _require_numbers("multiply", a, b)
    return make_number(a * b)


def div(a, b):
    _require_numbers("divide", a, b)
    if b == 0:
        raise DivisionByZeroError()
    # truncate toward zero; floor division rounds toward -inf
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return make_number(q)


# -------- comparison --------
def gt(a, b) -> bool:
    _require_numbers("compare", a, b)
    return a > b


def lt(a, b) -> bool:
    _require_numbers("compare", a, b)
    return a < b


def eq(a, b) -> bool:
    kind = type_name(a)
    if kind != type_name(b):
        return False
    if kind == "null":
        return True
    if kind == "array":
        if len(a) != len(b):
            return False
        for x, y in zip(a, b):
            if not eq(x, y):
                return False
        return True
    return a == b


def is_truthy(value) -> bool:
    kind = type_name(value)
    if kind == "number":
        return value > 0
    if kind == "boolean":
        return value
    if kind == "array" or kind == "string":
        return len(value) > 0
    return False


# -------- arrays --------
def _require_array(target):
    if not isinstance(target, list):
        raise NotAnArrayError(type_name(target))


def _check_index(target, index) -> int:
    if not is_number(index):
        raise PebbleTypeError(f"array index must be number, got {type_name(index)}")
    if index < 0 or index >= len(target):
        raise ArrayIndexError(index, len(target))
    return index


def array_push(target, value):
    _require_array(target)
    target.append(value)


def array_pop(target):
    _require_array(target)
    if not target:
        raise ArrayIndexError(-1, 0)
    return target.pop()


def array_get(target, index):
    _require_array(target)
    return target[_check_index(target, index)]


def array_set(target, index, value):
    _require_array(target)
    target[_check_index(target, index)] = value


def copy_value(value):
    # arrays have value semantics at the language level
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value


def format_value(value) -> str:
    kind = type_name(value)
    if kind == "null":
        return "null"
    if kind == "boolean":
        return "true" if value else "false"
    if kind == "array":
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if kind == "string":
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return str(value)
