import sys
import traceback

from vm import VM
from compiler import Compiler
from lexer import Lexer
from parser import Parser
from errors import PebbleError
from values import format_value


USAGE = """Usage:
  python cli.py parse <file.pbl>
  python cli.py build <file.pbl>
  python cli.py run <file.pbl>
  python cli.py repl
  (optional) --debug to show Python traceback
  (optional) --trace to print every executed instruction
  (optional) --max-steps N to stop runaway loops"""


# Simple AST printer (so you can SEE what the parser built)
def ast_to_dict(node):
    if node is None:
        return None
    if isinstance(node, list):
        return [ast_to_dict(n) for n in node]

    t = node.__class__.__name__
    d = {"type": t}

    if t in ("Program", "Block"):
        d["statements"] = [ast_to_dict(s) for s in node.statements]
    elif t in ("Number", "StringLiteral"):
        d["value"] = node.value
    elif t in ("VarDecl", "VarAssign"):
        d["name"] = node.name
        d["value"] = ast_to_dict(node.value)
    elif t == "VarRef":
        d["name"] = node.name
    elif t == "BinOp":
        d["op"] = node.op
        d["left"] = ast_to_dict(node.left)
        d["right"] = ast_to_dict(node.right)
    elif t == "If":
        d["condition"] = ast_to_dict(node.condition)
        d["if_block"] = ast_to_dict(node.if_block)
        d["else_block"] = ast_to_dict(node.else_block)
    elif t == "While":
        d["condition"] = ast_to_dict(node.condition)
        d["body"] = ast_to_dict(node.body)
    elif t == "ArrayLiteral":
        d["elements"] = [ast_to_dict(e) for e in node.elements]
    elif t == "ArrayIndex":
        d["array"] = ast_to_dict(node.array)
        d["index"] = ast_to_dict(node.index)
    elif t == "ArrayAssign":
        d["array"] = ast_to_dict(node.array)
        d["index"] = ast_to_dict(node.index)
        d["value"] = ast_to_dict(node.value)
    else:
        d["raw"] = str(node)

    return d


def pretty(obj, indent=0):
    sp = "  " * indent
    if isinstance(obj, dict):
        lines = []
        for k, v in obj.items():
            if isinstance(v, (dict, list)):
                lines.append(f"{sp}{k}:")
                lines.append(pretty(v, indent + 1))
            else:
                lines.append(f"{sp}{k}: {v}")
        return "\n".join(lines)
    if isinstance(obj, list):
        lines = []
        for item in obj:
            lines.append(f"{sp}-")
            lines.append(pretty(item, indent + 1))
        return "\n".join(lines)
    return f"{sp}{obj}"


def parse_source(code):
    return Parser(Lexer(code)).parse()


def read_source(path):
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def report(e, debug):
    if debug:
        traceback.print_exc()
    else:
        print(str(e))


def cmd_parse(path, debug=False):
    try:
        program = parse_source(read_source(path))
    except (PebbleError, OSError) as e:
        report(e, debug)
        sys.exit(1)
    print(pretty(ast_to_dict(program)))


def cmd_build(path, debug=False):
    try:
        program = parse_source(read_source(path))
        bc = Compiler(source_path=path).compile(program)
    except (PebbleError, OSError) as e:
        report(e, debug)
        sys.exit(1)

    print("INSTRUCTIONS:")
    print(bc.listing())


def cmd_run(path, debug=False, trace=False, max_steps=None):
    try:
        program = parse_source(read_source(path))
        bc = Compiler(source_path=path).compile(program)
        vm = VM(bc, max_steps=max_steps, trace=trace)
        vm.run()
    except (PebbleError, OSError) as e:
        report(e, debug)
        sys.exit(1)

    print(vm.dump())


def _count_braces_delta(line: str) -> int:
    # Minimal brace balancer for REPL multiline input.
    delta = 0
    in_string = False
    escaped = False
    for ch in line:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == "#":
            break
        if ch == '"':
            in_string = True
        elif ch == "{":
            delta += 1
        elif ch == "}":
            delta -= 1
    return delta


def cmd_repl(debug=False, trace=False, max_steps=None):
    # One VM for the whole session: the global frame and the stack persist.
    vm = VM([], max_steps=max_steps, trace=trace)

    print("Pebble REPL. Type :q to quit.")

    buffer_lines = []
    brace_depth = 0
    while True:
        prompt = "pebble> " if not buffer_lines else "...> "
        try:
            line = input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            break

        stripped = line.strip()
        if not buffer_lines and stripped in (":q", ":quit", "quit", "exit"):
            break

        if not buffer_lines and stripped == ":env":
            print(vm.dump())
            continue

        if not stripped and not buffer_lines:
            continue

        buffer_lines.append(line)
        brace_depth += _count_braces_delta(line)

        # Wait for block completion if braces aren't balanced yet.
        if brace_depth > 0:
            continue

        source = "\n".join(buffer_lines) + "\n"
        buffer_lines = []
        brace_depth = 0

        depth_before = len(vm.stack)
        try:
            bc = Compiler(source_path="<repl>").compile(parse_source(source))
            vm.load_program(bc)
            vm.steps = 0
            vm.run()
        except PebbleError as e:
            report(e, debug)
            vm.unwind_scopes()
            del vm.stack[depth_before:]
            continue

        # auto-print expression results, then drop them
        for value in vm.stack[depth_before:]:
            print(format_value(value))
        del vm.stack[depth_before:]


def main():
    args = sys.argv[1:]

    debug = False
    if "--debug" in args:
        debug = True
        args.remove("--debug")

    trace = False
    if "--trace" in args:
        trace = True
        args.remove("--trace")

    max_steps = None
    if "--max-steps" in args:
        i = args.index("--max-steps")
        try:
            max_steps = int(args[i + 1])
        except (IndexError, ValueError):
            print("--max-steps expects an integer")
            sys.exit(1)
        del args[i : i + 2]

    if not args:
        print(USAGE)
        sys.exit(1)

    cmd = args[0]

    if cmd == "repl":
        if len(args) != 1:
            print(USAGE)
            sys.exit(1)
        cmd_repl(debug=debug, trace=trace, max_steps=max_steps)
        return

    if len(args) != 2:
        print(USAGE)
        sys.exit(1)

    path = args[1]

    if cmd == "parse":
        cmd_parse(path, debug=debug)
    elif cmd == "build":
        cmd_build(path, debug=debug)
    elif cmd == "run":
        cmd_run(path, debug=debug, trace=trace, max_steps=max_steps)
    else:
        print(f"Unknown command: {cmd}")
        sys.exit(1)


if __name__ == "__main__":
    main()
