"""
modtree - nested Go module dependency trees.
"""

__version__ = "0.1.0"
