"""
Data models for sequences, bins and repeat annotations.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def normalize_type(repeat_type: str) -> str:
    """
    Reduce a repeat label to its top-level family.

    ``"LINE/L1"`` becomes ``"LINE"`` and an uncertain call such as ``"LINE?"``
    becomes ``"LINE"``. Empty labels are reported as ``"Unknown"``.
    """
    family = repeat_type.strip().split("/", 1)[0].strip().rstrip("?")
    return family or RepeatClass.UNKNOWN.value


class RepeatClass(str, Enum):
    """Closed set of top-level repeat classes used for filtering."""

    DNA = "DNA"
    LINE = "LINE"
    LTR = "LTR"
    PLE = "PLE"
    RC = "RC"
    SINE = "SINE"
    UNKNOWN = "Unknown"
    OTHER = "Other"

    @classmethod
    def from_type(cls, normalized_type: str) -> "RepeatClass":
        """Map a normalized repeat type onto its class, defaulting to Other."""
        for member in cls:
            if member.value == normalized_type:
                return member
        return cls.OTHER


class SequenceRecord(BaseModel):
    """A chromosome or scaffold with its length."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Sequence name")
    length: int = Field(description="Sequence length in bases")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate that the sequence name is not empty."""
        if not v:
            raise ValueError("Sequence name must not be empty")
        return v

    @field_validator('length')
    @classmethod
    def validate_length(cls, v):
        """Validate that the sequence length is positive."""
        if v <= 0:
            raise ValueError("Sequence length must be positive")
        return v


class Bin(BaseModel):
    """A fixed-width coordinate window over a sequence (1-based, inclusive)."""

    model_config = ConfigDict(frozen=True)

    sequence: str = Field(description="Owning sequence name")
    index: int = Field(description="Bin number within the sequence (1-based)")
    start: int = Field(description="First base of the bin (1-based)")
    end: int = Field(description="Last base of the bin (inclusive)")

    @field_validator('index', 'start')
    @classmethod
    def validate_positive(cls, v):
        """Validate that index and start are 1-based."""
        if v < 1:
            raise ValueError("Bin index and start must be >= 1")
        return v

    @model_validator(mode='after')
    def validate_end_after_start(self):
        """Validate that the bin is not empty."""
        if self.end < self.start:
            raise ValueError("Bin end must not precede bin start")
        return self

    @property
    def width(self) -> int:
        return self.end - self.start + 1

    @property
    def name(self) -> str:
        return f"{self.sequence}_{self.index}"

    def contains(self, position: int) -> bool:
        return self.start <= position <= self.end


class AnnotatedInterval(BaseModel):
    """
    A repeat annotation on a sequence.

    Coordinates are 1-based and inclusive. They are not range-checked here:
    the engine reports inverted or out-of-range coordinates as
    MalformedInterval so they can be collected as faults.
    """

    model_config = ConfigDict(frozen=True)

    sequence: str = Field(description="Sequence name")
    start: int = Field(description="Start position (1-based)")
    end: int = Field(description="End position (inclusive)")
    type: str = Field(description="Repeat class/family label, e.g. LINE/L1")
    id: str = Field(description="Annotation identifier")
    divergence: Optional[float] = Field(
        default=None,
        description="Percent divergence from the consensus"
    )

    @property
    def length(self) -> int:
        return self.end - self.start + 1


class ClippedInterval(BaseModel):
    """The part of an annotated interval that lies inside a single bin."""

    model_config = ConfigDict(frozen=True)

    bin: Bin = Field(description="Bin the piece belongs to")
    start: int = Field(description="Start position (1-based)")
    end: int = Field(description="End position (inclusive)")
    type: str = Field(description="Repeat type of the source interval")

    @model_validator(mode='after')
    def validate_within_bin(self):
        """Validate that the piece lies inside its bin."""
        if self.start > self.end:
            raise ValueError("Clipped interval end must not precede its start")
        if self.start < self.bin.start or self.end > self.bin.end:
            raise ValueError(
                f"Clipped interval [{self.start}, {self.end}] "
                f"outside bin {self.bin.name}"
            )
        return self

    @property
    def length(self) -> int:
        return self.end - self.start + 1


class NucleotideTally(BaseModel):
    """Nucleotide class counts for one bin."""

    model_config = ConfigDict(frozen=True)

    bin_name: str = Field(description="Bin name")
    gc_count: int = Field(description="Number of G and C bases")
    at_count: int = Field(description="Number of A and T bases")
    n_count: int = Field(description="Number of N bases")
    other_count: int = Field(default=0, description="Number of other symbols")
    gc_percentage: Optional[float] = Field(
        default=None,
        description="100 * GC / (GC + AT); None when GC + AT is zero"
    )

    @field_validator('gc_count', 'at_count', 'n_count', 'other_count')
    @classmethod
    def validate_counts(cls, v):
        """Validate that counts are non-negative."""
        if v < 0:
            raise ValueError("Nucleotide counts must be non-negative")
        return v

    @field_validator('gc_percentage')
    @classmethod
    def validate_percentage(cls, v):
        """Validate that the percentage is between 0 and 100."""
        if v is not None and not 0 <= v <= 100:
            raise ValueError("GC percentage must be between 0 and 100")
        return v

    @property
    def defined(self) -> bool:
        return self.gc_percentage is not None


class Fault(BaseModel):
    """A record rejected while the batch continued."""

    kind: str = Field(description="Error kind, e.g. MalformedInterval")
    message: str = Field(description="Human readable description")
    sequence: Optional[str] = Field(default=None, description="Sequence name")
    interval_id: Optional[str] = Field(default=None, description="Annotation identifier")
    type: Optional[str] = Field(default=None, description="Normalized repeat type")
    bins: List[str] = Field(
        default_factory=list,
        description="Bins whose aggregates are incomplete because of this record"
    )
