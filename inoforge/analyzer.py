"""Offline heuristic checks for Arduino sketches.

These are lexical checks, not a parser. Braces and parentheses inside
string literals, character constants or comments are counted like any
other, and the semicolon check only looks at how a line ends. The
results are a best-effort hint for the offline demo compiler and say
nothing about whether a real toolchain would accept the sketch.
"""

import re
from dataclasses import dataclass, field

from inoforge.models import Diagnostic, DiagnosticKind

# (function, accepted signatures)
ENTRY_POINTS = [
    ("setup", ("void setup()", "void setup ()")),
    ("loop", ("void loop()", "void loop ()")),
]

_SKIP_KEYWORDS = (
    # control flow
    "if", "else", "for", "while", "do", "switch", "case", "default", "try", "catch",
    # declarations
    "void", "class", "struct", "enum", "union", "namespace", "typedef", "template",
    # visibility
    "public", "private", "protected",
)

_KEYWORD_RE = re.compile(r"^(?:%s)\b" % "|".join(_SKIP_KEYWORDS))
_BRACE_ONLY_RE = re.compile(r"^[{};\s]+$")
_SUSPICIOUS_END_RE = re.compile(r"[A-Za-z0-9_\]\"']$")


@dataclass
class AnalysisReport:
    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def check_balance(code: str) -> list[Diagnostic]:
    """Compare raw counts of '{'/'}' and '('/')'."""
    found = []
    pairs = [
        ("{", "}", DiagnosticKind.UNBALANCED_BRACES),
        ("(", ")", DiagnosticKind.UNBALANCED_PARENS),
    ]
    for open_char, close_char, kind in pairs:
        opened = code.count(open_char)
        closed = code.count(close_char)
        if opened != closed:
            found.append(Diagnostic(kind, {"opened": opened, "closed": closed}))
    return found


def check_entry_points(code: str) -> list[Diagnostic]:
    """Require setup() and loop() to be defined somewhere in the sketch."""
    found = []
    for function, signatures in ENTRY_POINTS:
        if not any(sig in code for sig in signatures):
            found.append(Diagnostic(DiagnosticKind.MISSING_ENTRY_POINT, {"function": function}))
    return found


def _skip_line(line: str) -> bool:
    if not line:
        return True
    if line.startswith(("//", "/*", "*", "#")):
        return True
    if _BRACE_ONLY_RE.match(line):
        return True
    return bool(_KEYWORD_RE.match(line))


def check_semicolons(code: str) -> list[Diagnostic]:
    """Flag statement-looking lines that do not end in ';'.

    Lines ending in ')' are left alone since they are usually the head of
    a multi-line call or a condition.
    """
    found = []
    for number, raw in enumerate(code.splitlines(), 1):
        line = raw.strip()
        if _skip_line(line) or len(line) <= 3:
            continue
        if "//" in line or line.endswith(")"):
            continue
        if _SUSPICIOUS_END_RE.search(line):
            found.append(Diagnostic(DiagnosticKind.MISSING_SEMICOLON, {"line": number, "text": line}))
    return found


def analyze(code: str) -> AnalysisReport:
    """Run every check. Structural problems are errors, semicolons are warnings."""
    report = AnalysisReport()
    report.errors.extend(check_balance(code))
    report.errors.extend(check_entry_points(code))
    report.warnings.extend(check_semicolons(code))
    return report
