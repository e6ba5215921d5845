"""Prop firm evaluation account tracker.

Imports broker trade-history exports, derives performance metrics and checks
accounts against funding program rules.
"""

__version__ = "1.0.0"
