"""Minbar content backend: books, tips and posts for a personal website"""

__version__ = "1.0.0"
