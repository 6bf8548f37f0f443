#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Allow ``python -m stemimg``."""

import sys

from stemimg.cli import main

if __name__ == "__main__":
    sys.exit(main())
