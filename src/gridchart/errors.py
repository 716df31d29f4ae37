from __future__ import annotations

# ============================================================================
# Compilation errors
#
# Every error is terminal: the pipeline stops at the first one and nothing
# is rendered. All of them derive from ValueError so callers that only care
# about "bad input" can catch a single type.
# ============================================================================


class ChartError(ValueError):
    """Base class for all errors raised while compiling a chart."""

    kind = "error"

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        self.line = line
        self.column = column
        if line is not None and column is not None:
            message = f"{message} (line {line}, column {column})"
        super().__init__(message)


class ChartSyntaxError(ChartError):
    kind = "syntax error"

    def __init__(self, position: int, line: int, column: int, expected: str, found: str = "") -> None:
        self.position = position
        self.expected = expected
        self.found = found
        detail = f"Expected {expected}"
        if found:
            detail += f", found {found!r}"
        super().__init__(detail, line, column)


class MisplacedTextShorthandError(ChartError):
    kind = "misplaced text shorthand"

    def __init__(self, line: int, column: int) -> None:
        super().__init__(
            "Text shorthand must be the first item of an attribute list",
            line,
            column,
        )


class DuplicateAttributeError(ChartError):
    kind = "duplicate attribute"

    def __init__(self, key: str, line: int | None = None, column: int | None = None) -> None:
        self.key = key
        super().__init__(f'Attribute "{key}" is given more than once', line, column)


class UnknownValueError(ChartError):
    kind = "unknown value"

    def __init__(
        self,
        key: str,
        value: str,
        allowed: tuple[str, ...],
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.key = key
        self.value = value
        self.allowed = allowed
        super().__init__(
            f'Unknown value "{value}" for "{key}"; expected one of: {", ".join(allowed)}',
            line,
            column,
        )


class DuplicateDefineEntryError(ChartError):
    kind = "duplicate define entry"

    def __init__(self, identifier: str, line: int | None = None, column: int | None = None) -> None:
        self.identifier = identifier
        super().__init__(f'Identifier "{identifier}" is defined more than once', line, column)


class DuplicateLabelError(ChartError):
    kind = "duplicate label"

    def __init__(self, name: str, line: int | None = None, column: int | None = None) -> None:
        self.name = name
        super().__init__(f'Label "{name}" is used more than once', line, column)


class UnresolvedLabelError(ChartError):
    kind = "unresolved label"

    def __init__(self, name: str, line: int | None = None, column: int | None = None) -> None:
        self.name = name
        super().__init__(f'No node with label "{name}"', line, column)


class NoAdjacentNodeError(ChartError):
    kind = "no adjacent node"

    def __init__(
        self,
        direction: str,
        row: int,
        col: int,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.direction = direction
        self.row = row
        self.col = col
        super().__init__(
            f'No node next to grid cell ({row}, {col}) in direction "{direction}"',
            line,
            column,
        )
