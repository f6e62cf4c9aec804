"""
Diagen backend - turns architecture prose into icon-backed diagrams.
"""

__version__ = "0.5.0"
