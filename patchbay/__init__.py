"""
Patchbay - shared multi-agent conversation core
"""

__version__ = "1.0.0"
