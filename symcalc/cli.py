#!/usr/bin/env python3
"""
symcalc Command-Line Interface

Provides interactive REPL, script execution, and pipe/filter modes.

Usage:
    symcalc                         # Start REPL
    symcalc script.calc             # Run script
    symcalc -e "x*x*2"              # Evaluate expression
    symcalc -D r=2 -e "r^2*3"       # One-shot with a variable defined
    echo "1/3+1/6" | symcalc        # Filter mode

Script Format (.calc files):
    #!/usr/bin/env symcalc
    :tree off

    r = 2
    area = 3*r^2
    area/4

REPL Commands:
    :help              Show help
    :vars              List defined variables
    :operators         List registered operators
    :undefine NAME     Remove a variable
    :clear             Remove all variables
    :eval on|off       Toggle evaluation (off shows the parsed tree)
    :tree on|off       Toggle structural tree output
    :quit              Exit
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .engine import Calculator, format_tree
from .errors import SymcalcError

logger = logging.getLogger(__name__)

# Try to import readline for better REPL experience
try:
    import readline
    HAS_READLINE = True
except ImportError:
    HAS_READLINE = False

ON_VALUES = ("on", "true", "1")
OFF_VALUES = ("off", "false", "0")


class SymcalcCompleter:
    """Tab completer for the symcalc REPL."""

    COMMANDS = [
        ":help", ":quit", ":exit", ":q",
        ":vars", ":operators", ":undefine", ":clear",
        ":eval", ":tree",
    ]

    TOGGLE_OPTIONS = ["on", "off"]

    def __init__(self, repl: "SymcalcREPL"):
        self.repl = repl
        self.matches: List[str] = []

    def complete(self, text: str, state: int) -> Optional[str]:
        """Return the next possible completion for 'text'."""
        if state == 0:
            line = readline.get_line_buffer() if HAS_READLINE else ""
            self.matches = self._get_matches(text, line)

        try:
            return self.matches[state]
        except IndexError:
            return None

    def _get_matches(self, text: str, line: str) -> List[str]:
        line = line.lstrip()

        if line.startswith(":eval ") or line.startswith(":tree "):
            return [t for t in self.TOGGLE_OPTIONS if t.startswith(text)]

        if line.startswith(":undefine "):
            return [v for v in sorted(self.repl.calculator.variables()) if v.startswith(text)]

        if text.startswith(":") or (line.startswith(":") and " " not in line):
            return [c for c in self.COMMANDS if c.startswith(text)]

        # Expression context: operators and variables
        names = self.repl.calculator.registry.operator_names()
        names += sorted(self.repl.calculator.variables())
        return [n for n in names if n.startswith(text)] if text else []


def count_parens(text: str) -> int:
    """Count unbalanced parentheses. Returns >0 if more open than close."""
    depth = 0
    for c in text:
        if c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
    return depth


class SymcalcREPL:
    """Interactive REPL for symcalc."""

    def __init__(self, calculator: Optional[Calculator] = None):
        self.calculator = calculator if calculator is not None else Calculator()
        self.evaluate = True
        self.tree = False
        self.running = True
        self.multi_line_buffer = ""

        # Set up readline history and completion
        if HAS_READLINE:
            self.history_file = Path.home() / ".symcalc_history"
            try:
                readline.read_history_file(self.history_file)
            except OSError:
                pass
            readline.set_history_length(1000)

            self.completer = SymcalcCompleter(self)
            readline.set_completer(self.completer.complete)
            readline.parse_and_bind("tab: complete")
            readline.set_completer_delims(" \t\n+-*/^()=,")

    def save_history(self):
        """Save readline history."""
        if HAS_READLINE:
            try:
                readline.write_history_file(self.history_file)
            except OSError as e:
                logger.debug("Could not write history to %s: %s", self.history_file, e)

    def _toggle(self, current: bool, arg: str) -> bool:
        arg = arg.lower()
        if arg in ON_VALUES:
            return True
        if arg in OFF_VALUES:
            return False
        return not current

    def handle_command(self, line: str) -> Optional[str]:
        """
        Handle a REPL command (starts with :).

        Returns a message to print, or None.
        """
        parts = line[1:].split(None, 1)
        if not parts:
            return "Unknown command. Type :help for help."

        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd == "help":
            return self.help_text()

        elif cmd in ("quit", "exit", "q"):
            self.running = False
            return None

        elif cmd == "vars":
            variables = self.calculator.variables()
            if not variables:
                return "No variables defined"
            return "\n".join(f"{name} = {value}" for name, value in sorted(variables.items()))

        elif cmd == "operators":
            return "Operators: " + ", ".join(self.calculator.registry.operator_names())

        elif cmd == "undefine":
            if not arg:
                return "Usage: :undefine NAME"
            if self.calculator.undefine(arg):
                return f"Undefined {arg}"
            return f"Unknown variable: {arg}"

        elif cmd == "clear":
            self.calculator.registry.clear_variables()
            return "Cleared all variables"

        elif cmd == "eval":
            self.evaluate = self._toggle(self.evaluate, arg)
            return f"Evaluation {'enabled' if self.evaluate else 'disabled'}"

        elif cmd == "tree":
            self.tree = self._toggle(self.tree, arg)
            return f"Tree output {'enabled' if self.tree else 'disabled'}"

        else:
            return f"Unknown command: {cmd}. Type :help for help."

    def help_text(self) -> str:
        """Return help text."""
        return """symcalc REPL Commands:
  :help              Show this help
  :vars              List defined variables
  :operators         List registered operators
  :undefine NAME     Remove a variable
  :clear             Remove all variables
  :eval on|off       Toggle evaluation (off shows the parsed expression)
  :tree on|off       Toggle structural tree output
  :quit              Exit

Syntax:
  x^2*3 + 1/(y-2)        Evaluate an expression
  y = x + 1              Define a variable
  ADD(x, 1)              Call an operator by name
"""

    def process_line(self, line: str) -> Optional[str]:
        """
        Process a single line of input.

        Returns the result to print, or None.
        """
        line = line.strip()

        # Empty line or comment
        if not line or line.startswith("#"):
            return None

        if line.startswith(":"):
            return self.handle_command(line)

        try:
            result = self.calculator.parse(line)
            if self.evaluate:
                result = self.calculator.evaluate(result)
            output = self.calculator.render(result)
        except SymcalcError as e:
            return f"Error: {e}"

        if self.tree:
            output += "\n" + format_tree(result)
        return output

    def run(self):
        """Run the REPL loop."""
        print(f"symcalc {__version__} - symbolic calculator")
        print("Type :help for help, :quit to exit")
        print()

        while self.running:
            try:
                prompt = "...... " if self.multi_line_buffer else "symcalc> "
                line = input(prompt)

                if self.multi_line_buffer:
                    self.multi_line_buffer += " " + line
                else:
                    self.multi_line_buffer = line

                # Unbalanced open parentheses continue on the next line
                if count_parens(self.multi_line_buffer) > 0:
                    continue

                complete_input = self.multi_line_buffer
                self.multi_line_buffer = ""

                result = self.process_line(complete_input)
                if result:
                    print(result)

            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                if self.multi_line_buffer:
                    print("\nInput cancelled")
                    self.multi_line_buffer = ""
                else:
                    print()
                continue

        self.save_history()


class ScriptRunner:
    """Runs symcalc scripts."""

    def __init__(self, repl: Optional[SymcalcREPL] = None):
        self.repl = repl if repl is not None else SymcalcREPL()

    def run_script(self, path: Path, quiet: bool = False) -> int:
        """
        Run a script file.

        Args:
            path: Path to the script
            quiet: If True, don't print expression results

        Returns:
            Exit code (0 for success)
        """
        try:
            lines = path.read_text().splitlines()
        except OSError as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            return 1

        for lineno, line in enumerate(lines, 1):
            line = line.strip()

            # Skip empty lines, comments, and shebang
            if not line or line.startswith("#"):
                continue

            if line.startswith(":"):
                result = self.repl.handle_command(line)
                if result and result.startswith("Unknown command"):
                    print(f"{path}:{lineno}: {result}", file=sys.stderr)
                    return 1
                if not self.repl.running:
                    break
                continue

            result = self.repl.process_line(line)
            if result and result.startswith("Error"):
                print(f"{path}:{lineno}: {result}", file=sys.stderr)
                return 1
            if result and not quiet:
                print(result)

        return 0

    def run_expression(self, expr_str: str) -> int:
        """
        Evaluate a single expression.

        Returns:
            Exit code (0 for success)
        """
        result = self.repl.process_line(expr_str)
        if result:
            if result.startswith("Error"):
                print(result, file=sys.stderr)
                return 1
            print(result)
        return 0

    def run_stdin(self) -> int:
        """
        Read expressions from stdin and evaluate them.

        Returns:
            Exit code (0 for success)
        """
        for line in sys.stdin:
            result = self.repl.process_line(line)
            if result:
                if result.startswith("Error"):
                    print(result, file=sys.stderr)
                    return 1
                print(result)

        return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="symcalc",
        description="symcalc - symbolic calculator",
        epilog="Examples:\n"
               "  symcalc                        Start REPL\n"
               "  symcalc script.calc            Run script\n"
               "  symcalc -e 'x*x*2'             Evaluate expression\n"
               "  symcalc -D r=2 -e 'r^2*3'      Define a variable first\n"
               "  echo '1/3+1/6' | symcalc       Filter mode\n",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "script",
        nargs="?",
        help="Script file to run"
    )

    parser.add_argument(
        "-e", "--expr",
        help="Evaluate a single expression"
    )

    parser.add_argument(
        "-D", "--define",
        action="append",
        default=[],
        metavar="NAME=EXPR",
        help="Define a variable before running (can be specified multiple times)"
    )

    parser.add_argument(
        "--no-eval",
        action="store_true",
        help="Print parsed expressions without evaluating them"
    )

    parser.add_argument(
        "--tree",
        action="store_true",
        help="Also print the structure of each result"
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (suppress script results)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log parsing and simplification steps"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    runner = ScriptRunner()
    runner.repl.evaluate = not args.no_eval
    runner.repl.tree = args.tree

    for definition in args.define:
        name, sep, text = definition.partition("=")
        if not sep:
            print(f"Invalid definition (expected NAME=EXPR): {definition}", file=sys.stderr)
            sys.exit(1)
        try:
            runner.repl.calculator.define(name.strip(), text)
        except SymcalcError as e:
            print(f"Error defining {name.strip()}: {e}", file=sys.stderr)
            sys.exit(1)

    # Determine mode
    if args.script:
        sys.exit(runner.run_script(Path(args.script), quiet=args.quiet))

    elif args.expr:
        sys.exit(runner.run_expression(args.expr))

    elif not sys.stdin.isatty():
        # Pipe/filter mode (stdin is not a terminal)
        sys.exit(runner.run_stdin())

    else:
        runner.repl.run()


if __name__ == "__main__":
    main()
