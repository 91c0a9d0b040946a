"""
Board Map

Floor plan placement and positional matching for distribution board
inspections.
"""

__version__ = "0.1.0"
