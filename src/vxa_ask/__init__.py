"""
VXA Ask - natural-language questions over customers, candidates and competitors.
"""

__version__ = "0.1.0"
