"""Allow ``python -m pathlight``."""

import sys

from pathlight.cli import main

if __name__ == "__main__":
    sys.exit(main())
