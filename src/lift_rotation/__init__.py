"""
lift-rotation: rotating workout generator.

Picks main movements by recency, rotates accessories round-robin and
suggests weights from the last sessions.
"""

__version__ = "0.1.0"
