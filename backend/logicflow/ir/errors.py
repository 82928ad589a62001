from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DiagnosticKind(Enum):
    PARSE_AMBIGUITY = "parse_ambiguity"
    DANGLING_BRANCH_TARGET = "dangling_branch_target"
    DUPLICATE_TITLE = "duplicate_title"


@dataclass
class ParseDiagnostic:
    """Non-fatal finding recorded while parsing flow text."""

    kind: DiagnosticKind
    message: str
    line_number: Optional[int] = None
    text: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "line_number": self.line_number,
            "text": self.text,
        }


class ExternalCallError(Exception):
    """The language-model service could not produce a usable answer."""


class ServiceUnavailableError(ExternalCallError):
    """Service unreachable, timed out or answered with a non-success status."""


class MalformedResponseError(ExternalCallError):
    """Service answered, but the payload is not a chat response."""


class GraphValidationFailed(ValueError):
    """Raised by raise_on_errors when a graph has error-severity issues."""

    def __init__(self, message: str, issues=None):
        super().__init__(message)
        self.issues = list(issues or [])
