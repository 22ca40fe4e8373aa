#!/usr/bin/env python3
"""Run patternscript as `python -m patternscript`."""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())
