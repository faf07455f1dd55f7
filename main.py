"""
Main entry point for the HireWise API server.
"""

import sys

from hirewise.cli import main


if __name__ == "__main__":
    sys.exit(main())
