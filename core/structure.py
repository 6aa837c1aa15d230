"""
Shallow structural parser over the token stream.

Recovers class and method boundaries (names, base types, parameters and
declaration lines) without building a statement tree. Method bodies are never
modeled: holiday calls are mined independently from raw lines, and the class
model is only used to locate where the class bodies are.

There is no dedent tracking. A class ends where the next `class` keyword
starts, so nested classes are flattened and reported as warnings.
"""

import logging

from core.exceptions import StructuralParseError
from core.models import ClassInfo, MethodInfo, Token
from models import TokenKind

logger = logging.getLogger(__name__)


class StructuralParser:
    """
    Walks a token stream once, collecting ClassInfo values.

    Attributes:
        errors: Header parse failures recorded during the last call to
            `parse_classes`. Each failed class or method was skipped.
        warnings: Non-fatal oddities, such as nested class declarations.
    """

    def __init__(self) -> None:
        self.errors: list[StructuralParseError] = []
        self.warnings: list[str] = []

    def parse_classes(self, tokens: list[Token]) -> list[ClassInfo]:
        """
        Recover every top-level class found in the token stream.

        A class whose header cannot be parsed is skipped and scanning resumes
        from the token after its keyword.

        Args:
            tokens: Token stream produced by the Tokenizer.

        Returns:
            ClassInfo values in source order.
        """
        self.errors = []
        self.warnings = []
        classes: list[ClassInfo] = []

        pos = 0
        while pos < len(tokens):
            if tokens[pos].kind != TokenKind.CLASS:
                pos += 1
                continue
            try:
                class_info, pos = self.parse_class(tokens, pos)
            except StructuralParseError as e:
                logger.debug("Skipping class: %s", e.message)
                self.errors.append(e)
                pos += 1
                continue
            classes.append(class_info)

        return classes

    def parse_class(self, tokens: list[Token], start: int) -> tuple[ClassInfo, int]:
        """
        Parse one class starting at a CLASS token.

        Args:
            tokens: The full token stream.
            start: Index of the CLASS token.

        Returns:
            Tuple of (ClassInfo, index of the next unconsumed token).

        Raises:
            StructuralParseError: If the class name is missing or the header
                is not terminated by a colon.
        """
        keyword = tokens[start]
        name_pos = start + 1
        if name_pos >= len(tokens) or tokens[name_pos].kind != TokenKind.IDENTIFIER:
            raise StructuralParseError(keyword.line, "expected class name")

        header, pos = self._scan_header(tokens, name_pos + 1, keyword)
        bases = _joined_names(header, depth_limit=1)

        methods: dict[str, MethodInfo] = {}
        while pos < len(tokens):
            token = tokens[pos]
            if token.kind == TokenKind.CLASS:
                if token.column > keyword.column:
                    self.warnings.append(
                        f"Line {token.line}: nested class inside "
                        f"'{tokens[name_pos].text}' treated as top-level"
                    )
                break
            if token.kind == TokenKind.DEF:
                try:
                    method, pos = self.parse_method(tokens, pos)
                except StructuralParseError as e:
                    logger.debug("Skipping method: %s", e.message)
                    self.errors.append(e)
                    pos += 1
                    continue
                methods[method.name] = method
                continue
            pos += 1

        class_info = ClassInfo(
            name=tokens[name_pos].text,
            base_type_names=tuple(bases),
            methods=methods,
            declaration_line=keyword.line,
        )
        return class_info, pos

    def parse_method(self, tokens: list[Token], start: int) -> tuple[MethodInfo, int]:
        """
        Parse one method header starting at a DEF token.

        Parameter names are the identifiers that open each top-level
        parameter slot; annotations and default values are ignored.

        Returns:
            Tuple of (MethodInfo, index of the token after the header colon).

        Raises:
            StructuralParseError: If the name is missing or the header is
                not terminated by a colon.
        """
        keyword = tokens[start]
        name_pos = start + 1
        if name_pos >= len(tokens) or tokens[name_pos].kind not in (
            TokenKind.IDENTIFIER,
            TokenKind.SELF,
        ):
            raise StructuralParseError(keyword.line, "expected method name")

        header, pos = self._scan_header(tokens, name_pos + 1, keyword)

        parameters: list[str] = []
        depth = 0
        expecting_name = False
        for token in header:
            if token.kind == TokenKind.INDENT:
                continue
            if token.text == "(":
                depth += 1
                expecting_name = depth == 1
                continue
            if token.text == ")":
                depth -= 1
                continue
            if depth != 1:
                continue
            if token.text == ",":
                expecting_name = True
            elif token.text == "*":
                continue
            elif expecting_name and token.kind in (
                TokenKind.IDENTIFIER,
                TokenKind.SELF,
            ):
                parameters.append(token.text)
                expecting_name = False
            else:
                expecting_name = False

        method = MethodInfo(
            name=tokens[name_pos].text,
            parameter_names=tuple(parameters),
            declaration_line=keyword.line,
        )
        return method, pos

    def _scan_header(
        self, tokens: list[Token], pos: int, keyword: Token
    ) -> tuple[list[Token], int]:
        """
        Collect header tokens up to the colon at parenthesis depth zero.

        Returns:
            Tuple of (header tokens without the colon, index after the colon).

        Raises:
            StructuralParseError: If the stream ends, another class/def
                keyword appears, or the header runs onto a new line outside
                parentheses before the terminating colon.
        """
        header: list[Token] = []
        depth = 0
        line = keyword.line
        while pos < len(tokens):
            token = tokens[pos]
            if token.kind in (TokenKind.CLASS, TokenKind.DEF):
                break
            if depth == 0 and token.line != line:
                break
            line = token.line
            if token.kind == TokenKind.OPERATOR:
                if token.text == "(":
                    depth += 1
                elif token.text == ")":
                    depth = max(depth - 1, 0)
                elif token.text == ":" and depth == 0:
                    return header, pos + 1
            header.append(token)
            pos += 1

        raise StructuralParseError(
            keyword.line, f"unterminated '{keyword.text}' header"
        )


def _joined_names(header: list[Token], depth_limit: int) -> list[str]:
    """
    Join dotted identifier chains found inside the header parentheses.

    Keyword arguments such as `metaclass=Meta` are skipped.
    """
    names: list[str] = []
    depth = 0
    current: list[str] = []
    skip_value = False
    after_dot = False

    def flush() -> None:
        if current and not skip_value:
            names.append(".".join(current))
        current.clear()

    for token in header:
        if token.kind == TokenKind.INDENT:
            continue
        text = token.text
        if text == "(":
            depth += 1
            continue
        if text == ")":
            if depth == depth_limit:
                flush()
                skip_value = False
            depth -= 1
            continue
        if depth != depth_limit:
            continue
        if text == ",":
            flush()
            skip_value = False
        elif text == "=":
            current.clear()
            skip_value = True
        elif text == ".":
            after_dot = True
            continue
        elif token.kind == TokenKind.IDENTIFIER:
            if current and not after_dot:
                flush()
            current.append(text)
        else:
            flush()
        after_dot = False

    flush()
    return names


def class_spans(classes: list[ClassInfo], last_line: int) -> list[tuple[int, int]]:
    """
    Compute the inclusive line span covered by each class.

    A class spans from its declaration line to the line before the next
    class declaration, or to `last_line` for the final class.
    """
    spans: list[tuple[int, int]] = []
    ordered = sorted(classes, key=lambda c: c.declaration_line)
    for index, class_info in enumerate(ordered):
        if index + 1 < len(ordered):
            end = ordered[index + 1].declaration_line - 1
        else:
            end = last_line
        spans.append((class_info.declaration_line, end))
    return spans
