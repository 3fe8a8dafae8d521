"""
Core systolic MAC array components.

This module contains the functional building blocks:
- ProcessingElement: pure MAC transition over a PEState
- SystolicArray: N x N grid of PE states advanced in lock-step
"""

from .pe import PEPhase, PEState, ProcessingElement
from .systolic_array import SystolicArray

__all__ = ["PEPhase", "PEState", "ProcessingElement", "SystolicArray"]
