"""Dispatch Desk - zone, call and staff state for a security dispatch desk"""

__version__ = "1.0.0"
