"""Core building blocks for Frame Audit.

This package contains the generative-backend abstraction and the
admission-control layer. It has ZERO dependency on any web framework.
"""

__version__ = "0.1.0"
