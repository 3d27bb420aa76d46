"""
daykeeper - Main Entry Point

Tracks tasks by date and hour and renders the day's schedule as a
wallpaper image.

Usage:
    python main.py help
"""
import sys
from pathlib import Path

# Ensure we're in the right directory for imports
sys.path.insert(0, str(Path(__file__).parent))

from daykeeper.cli import run


if __name__ == "__main__":
    run()
