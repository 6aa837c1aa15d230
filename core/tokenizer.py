"""
Tolerant line-oriented tokenizer for upstream holiday source files.

The tokenizer turns raw source text into a flat stream of tokens (keywords,
identifiers, literals, single-character operators and indentation markers)
that the structural parser walks to recover class and method boundaries.

It is deliberately forgiving: characters no rule recognizes are skipped and
counted rather than reported, since the goal is mining holiday registrations,
not validating the source language. The skipped-character counter makes drift
in the upstream syntax visible in tests instead of turning into silent data
loss.
"""

from dataclasses import dataclass
import re

from core.models import Token
from models import TokenKind


@dataclass(frozen=True)
class TokenRule:
    kind: TokenKind
    pattern: re.Pattern[str]


# Order matters: keywords before generic identifiers, first match wins.
DEFAULT_RULES: tuple[TokenRule, ...] = (
    TokenRule(TokenKind.CLASS, re.compile(r"class\b")),
    TokenRule(TokenKind.DEF, re.compile(r"def\b")),
    TokenRule(TokenKind.SELF, re.compile(r"self\b")),
    TokenRule(TokenKind.STRING, re.compile(r'"(?:[^"\\]|\\.)*"')),
    TokenRule(TokenKind.STRING, re.compile(r"'(?:[^'\\]|\\.)*'")),
    TokenRule(TokenKind.NUMBER, re.compile(r"\d+")),
    TokenRule(TokenKind.IDENTIFIER, re.compile(r"[A-Za-z_][A-Za-z0-9_]*")),
    TokenRule(TokenKind.OPERATOR, re.compile(r"[+\-*/=(),.:]")),
)


class Tokenizer:
    """
    Converts raw source text into a list of tokens, one line at a time.

    Each call to `tokenize` resets the diagnostic counters, so one instance
    should be used per source file when the counters matter.

    Attributes:
        rules: Ordered recognizer rules tried at every position.
        skipped_characters: Number of non-whitespace characters no rule
            matched during the last `tokenize` call.
    """

    def __init__(self, rules: tuple[TokenRule, ...] = DEFAULT_RULES):
        self.rules = rules
        self.skipped_characters = 0

    def tokenize(self, text: str) -> list[Token]:
        """
        Tokenize the given source text.

        Blank lines and full-line comments produce no tokens. Every other line
        starts with an INDENT token when it has leading spaces, followed by the
        tokens recognized on the rest of the line.

        Args:
            text: Raw source text.

        Returns:
            The flat token stream, in source order.
        """
        self.skipped_characters = 0
        tokens: list[Token] = []

        for line_number, line in enumerate(text.splitlines(), start=1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue

            indent = len(line) - len(line.lstrip(" "))
            if indent:
                tokens.append(Token(TokenKind.INDENT, " " * indent, line_number, 0))

            tokens.extend(self._tokenize_content(line, indent, line_number))

        return tokens

    def _tokenize_content(self, line: str, start: int, line_number: int) -> list[Token]:
        tokens: list[Token] = []
        pos = start

        while pos < len(line):
            char = line[pos]
            if char.isspace():
                pos += 1
                continue
            # Trailing comment ends the line
            if char == "#":
                break

            matched = False
            for rule in self.rules:
                match = rule.pattern.match(line, pos)
                if match and match.end() > pos:
                    tokens.append(Token(rule.kind, match.group(), line_number, pos))
                    pos = match.end()
                    matched = True
                    break

            if not matched:
                self.skipped_characters += 1
                pos += 1

        return tokens
