"""
Data models for the repeat landscape engine.
"""

from .landscape import (
    RepeatClass,
    normalize_type,
    SequenceRecord,
    Bin,
    AnnotatedInterval,
    ClippedInterval,
    NucleotideTally,
    Fault
)

__all__ = [
    "RepeatClass",
    "normalize_type",
    "SequenceRecord",
    "Bin",
    "AnnotatedInterval",
    "ClippedInterval",
    "NucleotideTally",
    "Fault"
]
