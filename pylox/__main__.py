"""CLI entry point for the pylox interpreter.

Usage:
    python -m pylox [-v|-vv|-vvv] [script]
    python -m pylox [-v...] --emit-ast <script>
    python -m pylox [-v...] --ast <ast_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --emit-ast    Parse the given .lox file and write its s-expression AST
  --ast         Execute a previously emitted AST file

Without a script an interactive prompt runs one line at a time until end
of input. Debug information is written to `debug.txt` in the current
directory when verbosity is greater than zero.

Exit codes follow sysexits: 64 usage error, 65 lexical, syntax or static
error, 66 missing input file, 70 runtime error.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from lark.exceptions import LarkError

from .ast_sexpr import ast_from_text, ast_to_text
from .errors import CompileError
from .parser import parse_program
from .runner import Lox, RunStatus

EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70

EXIT_CODES = {
    RunStatus.OK: 0,
    RunStatus.COMPILE_ERROR: EX_DATAERR,
    RunStatus.RUNTIME_ERROR: EX_SOFTWARE,
}


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EX_USAGE, f"{self.prog}: error: {message}\n")


def read_source(path: Path) -> Optional[str]:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        return None
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def run_prompt(lox: Lox) -> int:
    while True:
        try:
            line = input('> ')
        except EOFError:
            print()
            break
        # errors are reported per line; the session keeps going
        lox.run(line)
    return 0


def emit_ast(path: Path) -> int:
    source = read_source(path)
    if source is None:
        return EX_NOINPUT
    try:
        statements = parse_program(source)
    except CompileError as e:
        for error in e.errors:
            print(error, file=sys.stderr)
        return EX_DATAERR
    out_path = path.with_suffix(path.suffix + '.ast') if path.suffix != '' else path.with_name(path.name + '.ast')
    with open(out_path, 'w', encoding='utf-8') as out:
        out.write(ast_to_text(statements) + '\n')
    print(str(out_path))
    return 0


def run_ast(lox: Lox, path: Path) -> int:
    text = read_source(path)
    if text is None:
        return EX_NOINPUT
    try:
        statements = ast_from_text(text)
    except (LarkError, ValueError) as e:
        print(f"Error: invalid AST file {path}: {e}", file=sys.stderr)
        return EX_DATAERR
    return EXIT_CODES[lox.run_statements(statements)]


def main(argv: Optional[list] = None) -> int:
    parser = _ArgumentParser(prog='pylox', description="Lox language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LOX_FILE', help='emit the s-expression AST for the given .lox file')
    group.add_argument('--ast', metavar='AST_FILE', help='execute an AST file written by --emit-ast')
    parser.add_argument('script', nargs='?', help='Lox script to execute; omit for a prompt')
    args = parser.parse_args(argv)

    if args.emit_ast:
        if args.script:
            parser.error('--emit-ast takes no script argument')
        return emit_ast(Path(args.emit_ast))

    lox = Lox(debug_level=args.v)
    try:
        if args.ast:
            if args.script:
                parser.error('--ast takes no script argument')
            return run_ast(lox, Path(args.ast))
        if args.script is None:
            return run_prompt(lox)
        source = read_source(Path(args.script))
        if source is None:
            return EX_NOINPUT
        return EXIT_CODES[lox.run(source)]
    finally:
        lox.close()


if __name__ == '__main__':
    sys.exit(main())
