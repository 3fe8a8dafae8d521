"""
Amaranth RTL twin of the functional model.

- MacPE: one processing element, all three precisions
- MacMesh: N x N grid wired per Dataflow
"""

from .mesh import MacMesh
from .pe import MacPE

__all__ = ["MacPE", "MacMesh"]
