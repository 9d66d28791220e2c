"""Errors produced while assembling the published API document.

Secondary documents are optional: a failure to fetch, parse or merge one of
them is returned as data, logged by the assembler and never propagated as a
request failure.
"""

from dataclasses import dataclass, field

from routespec.core.enums import ErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class DocumentError:
    """Base document error (does NOT inherit from Exception).

    Attributes:
        code: Machine-readable error code.
        message: Human-readable message.
        url: Source URL of the secondary document, if any.
    """

    code: ErrorCode
    message: str
    url: str | None = None

    def __str__(self) -> str:
        """String representation of error."""
        return f"{self.code.value}: {self.message}"


@dataclass(frozen=True, slots=True, kw_only=True)
class FetchError(DocumentError):
    """Secondary document could not be fetched or decoded.

    Attributes:
        status_code: HTTP status returned by the remote server, if any.
    """

    status_code: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class MergeConflict(DocumentError):
    """Secondary document is structurally incompatible with the primary.

    Attributes:
        conflicts: One human-readable line per conflicting element.
    """

    conflicts: tuple[str, ...] = field(default_factory=tuple)
