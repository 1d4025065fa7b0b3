"""Filesystem scanning for model-weight files.

This module provides the scan engine and the data structures it emits.
"""

from ggufclean.scanning.models import (
    Candidate,
    CandidateStatus,
    InvalidRootError,
    ScanError,
    ScanErrorKind,
    ScanSession,
    ScanStatus,
)
from ggufclean.scanning.scanner import ModelScanner

__all__ = [
    "Candidate",
    "CandidateStatus",
    "InvalidRootError",
    "ModelScanner",
    "ScanError",
    "ScanErrorKind",
    "ScanSession",
    "ScanStatus",
]
