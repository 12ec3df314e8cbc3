"""
Main entry point for MODMA Fusion package

This allows running the package with: python -m modma_fusion
"""

import sys

from .cli.main import main

if __name__ == "__main__":
    sys.exit(main())
