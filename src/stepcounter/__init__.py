"""
Streaming accelerometer step counter.
"""

__version__ = "0.1.0"
