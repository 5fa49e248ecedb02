"""
Non-fatal diagnostics channel.

Core geometry operations raise on hard precondition violations. Orchestration
code (policy dispatch, the pipeline) may instead record a recoverable problem
here and continue with a fallback, e.g. an unknown transition type.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from layerpath.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Diagnostic:
    """A single recoverable warning."""

    source: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"[{self.source}] {self.message}"


@dataclass
class Diagnostics:
    """Ordered collection of warnings produced during a run."""

    entries: List[Diagnostic] = field(default_factory=list)

    def warn(self, source: str, message: str, **context: Any) -> Diagnostic:
        entry = Diagnostic(source=source, message=message, context=context)
        self.entries.append(entry)
        logger.warning("diagnostic_warning", source=source, message=message, **context)
        return entry

    def extend(self, other: "Diagnostics") -> None:
        self.entries.extend(other.entries)

    @property
    def messages(self) -> List[str]:
        return [str(entry) for entry in self.entries]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)
