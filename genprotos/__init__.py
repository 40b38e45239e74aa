"""
genprotos — regenerate Go sources from protobuf description files.
"""

__version__ = "0.1.0"
