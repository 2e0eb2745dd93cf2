"""Command-line entry point."""

from __future__ import annotations

import json
import logging
import os
import sys

from .aiscript import emit
from .aiscript.ast import ANode, to_dict
from .bundler import BundleError, Bundler
from .convert import ConvertError, Converter
from .frontend import Frontend, ModuleResolutionError, SourceError

logger = logging.getLogger(__name__)

MODES: list[str] = ["bundle", "modules"]

OUTPUT_DIR = "dist"

USAGE: str = """\
usage: tsais transpile ENTRY [options]

Transpile a TypeScript entry file and its imports to AiScript.

Options:
  -o, --output FILE   Write output to FILE ('-' for stdout)
                      (default: dist/<entry-stem>.ais)
  --root DIR          Resolve non-relative imports against DIR
                      (default: current directory)
  --mode MODE         bundle: flatten every module into one scope
                      modules: keep each imported module in its own scope
                      (default: bundle)
  --ast               Print the output node tree as JSON instead of source
  --verbose           Log compilation progress to stderr
  --help              Show this help message
"""


class Options:
    """Parsed command line."""

    def __init__(self) -> None:
        self.entry: str | None = None
        self.output: str | None = None
        self.root: str | None = None
        self.mode: str = "bundle"
        self.ast: bool = False
        self.verbose: bool = False


def default_output(entry: str) -> str:
    stem = os.path.splitext(os.path.basename(entry))[0]
    return os.path.join(OUTPUT_DIR, stem + ".ais")


def write_output(output: str, output_file: str) -> int:
    """Write output to file or stdout. Returns 0 on success, 1 on error."""
    if output_file == "-":
        print(output, end="")
        return 0
    try:
        parent = os.path.dirname(output_file)
        if parent != "":
            os.makedirs(parent, exist_ok=True)
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(output)
    except OSError:
        print("error: cannot write '" + output_file + "'", file=sys.stderr)
        return 1
    logger.debug("wrote %s", output_file)
    return 0


def _usage_error(msg: str) -> None:
    print("error: " + msg, file=sys.stderr)
    sys.exit(2)


def parse_args(args: list[str]) -> Options:
    """Parse command-line arguments. Exits 2 on a usage error."""
    opts = Options()
    if len(args) == 0:
        print(USAGE, end="", file=sys.stderr)
        sys.exit(2)
    if args[0] == "--help" or args[0] == "-h":
        print(USAGE, end="")
        sys.exit(0)
    if args[0] != "transpile":
        _usage_error("unknown command '" + args[0] + "'")
    i = 1
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            sys.exit(0)
        elif arg == "-o" or arg == "--output" or arg == "--root" or arg == "--mode":
            if i + 1 >= len(args):
                _usage_error(arg + " requires an argument")
            value = args[i + 1]
            if arg == "--root":
                opts.root = value
            elif arg == "--mode":
                if value not in MODES:
                    _usage_error("unknown mode '" + value + "' (expected bundle or modules)")
                opts.mode = value
            else:
                opts.output = value
            i += 2
        elif arg == "--ast":
            opts.ast = True
            i += 1
        elif arg == "--verbose":
            opts.verbose = True
            i += 1
        elif arg.startswith("-") and arg != "-":
            _usage_error("unknown flag '" + arg + "'")
        elif opts.entry is None:
            opts.entry = arg
            i += 1
        else:
            _usage_error("unexpected argument '" + arg + "'")
    if opts.entry is None:
        _usage_error("transpile requires an entry file")
    return opts


def transpile(opts: Options) -> list[ANode]:
    assert opts.entry is not None
    if opts.mode == "modules":
        return Converter(None, Frontend(opts.root)).convert_program(opts.entry)
    return Bundler(opts.entry, opts.root).bundle()


def _report(file: str, line: int, col: int, msg: str) -> int:
    print("error: " + file + ":" + str(line) + ":" + str(col) + ": " + msg, file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    opts = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if opts.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        nodes = transpile(opts)
    except BundleError as e:
        return _report(e.source_file, e.line, e.column, e.msg)
    except ConvertError as e:
        return _report(e.file, e.line, e.col, e.msg)
    except (SourceError, ModuleResolutionError) as e:
        return _report(e.file, e.line, e.col, e.msg)
    if opts.ast:
        output = json.dumps(to_dict(nodes), indent=2) + "\n"
    else:
        output = emit(nodes)
        if not output.endswith("\n"):
            output += "\n"
    assert opts.entry is not None
    return write_output(output, opts.output if opts.output is not None else default_output(opts.entry))


if __name__ == "__main__":
    sys.exit(main())
