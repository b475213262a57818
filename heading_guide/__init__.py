"""
heading-guide: fuse compass, GPS course and manual heading into one stable value.

Combines the fused heading with position and a target coordinate to produce
turn-by-turn guidance (distance, relative bearing, instruction).
"""

__version__ = "0.1.0"
