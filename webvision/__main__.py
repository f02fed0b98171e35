"""
Entry point for running as a module.

Usage: python -m webvision
"""

import sys
from .cli import main

if __name__ == "__main__":
    sys.exit(main())
