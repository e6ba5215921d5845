"""
Prop Firm Tracker - Main Entry Point

Usage:
    # Analyze a trade history export
    python main.py --import trades.csv

    # Evaluate against a funding program
    python main.py --import trades.csv --program 50K

    # List program presets
    python main.py --programs
"""

import sys

from proptrack.cli import main

if __name__ == "__main__":
    sys.exit(main())
