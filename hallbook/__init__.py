"""
Seminar hall booking and maintenance service.
"""

__version__ = "0.1.0"
