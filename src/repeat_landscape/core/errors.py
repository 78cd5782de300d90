"""
Exceptions raised by the binning and aggregation engine.
"""

from typing import Any, Dict, Optional


class LandscapeError(Exception):
    """Base class for all repeat landscape errors."""

    kind = "LandscapeError"

    def __init__(
        self,
        message: str,
        sequence: Optional[str] = None,
        interval_id: Optional[str] = None,
        **context: Any
    ):
        super().__init__(message)
        self.message = message
        self.sequence = sequence
        self.interval_id = interval_id
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        """Return the error as a flat dictionary for logging."""
        return {
            "kind": self.kind,
            "message": self.message,
            "sequence": self.sequence,
            "interval_id": self.interval_id,
            **self.context,
        }


class InvalidConfig(LandscapeError):
    """Configuration value is unusable (e.g. a non-positive bin size)."""

    kind = "InvalidConfig"


class UnknownSequence(LandscapeError):
    """A record references a sequence absent from the sequence index."""

    kind = "UnknownSequence"


class MalformedInterval(LandscapeError):
    """Interval coordinates are inverted or fall outside the sequence."""

    kind = "MalformedInterval"


class UnsupportedSpan(LandscapeError):
    """Interval crosses more than one bin boundary in single-split mode."""

    kind = "UnsupportedSpan"


class UndefinedRatio(LandscapeError):
    """GC percentage requested for a bin without any G, C, A or T."""

    kind = "UndefinedRatio"


class UnexpectedSymbol(LandscapeError):
    """Strict nucleotide mode found a symbol outside G, C, A, T and N."""

    kind = "UnexpectedSymbol"


# Errors that are reported per record and may be collected
RECORD_ERRORS = (
    UnknownSequence,
    MalformedInterval,
    UnsupportedSpan,
    UndefinedRatio,
    UnexpectedSymbol,
)
