"""Error types with formatted source context."""

from __future__ import annotations


class ClassWriterError(Exception):
    """Base class for structural errors raised by the analyser and writer."""

    def __init__(self, message: str, source: str = "", line: int | None = None) -> None:
        self.message = message
        self.source = source
        self.line = line
        super().__init__(message)

    def format(self, filename: str = "input.php") -> str:
        if self.line is None:
            return f"error: {self.message}\n  --> {filename}"

        lines = self.source.splitlines()
        line_idx = self.line - 1

        if 0 <= line_idx < len(lines):
            source_line = lines[line_idx]
        else:
            source_line = ""

        line_num = str(self.line)
        gutter_width = len(line_num) + 1

        blank_gutter = " " * gutter_width + "|"
        line_gutter = f"{line_num:>{gutter_width - 1}} |"

        return (
            f"error: {self.message}\n"
            f"{' ' * gutter_width}--> {filename}:{self.line}\n"
            f"{blank_gutter}\n"
            f"{line_gutter} {source_line}\n"
            f"{blank_gutter}"
        )


class NoMethodFoundInClass(ClassWriterError):
    """Raised when an operation needs at least one method and the class has none."""

    def __init__(self, source: str = "", line: int | None = None) -> None:
        super().__init__("no method found in class", source, line)


class NamedMethodNotFoundException(ClassWriterError):
    """Raised when no method with the requested name exists in the class."""

    def __init__(self, method_name: str, source: str = "", line: int | None = None) -> None:
        self.method_name = method_name
        super().__init__(f"target method '{method_name}' not found", source, line)


class ClassNotFoundInSource(ClassWriterError):
    """Raised when the source contains no class declaration."""

    def __init__(self, source: str = "") -> None:
        super().__init__("no class declaration found", source, None)
