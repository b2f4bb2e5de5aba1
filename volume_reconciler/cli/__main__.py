#!/usr/bin/env python3
"""
Entry point for volume-reconciler CLI tool.
"""

import sys

from volume_reconciler.cli.cli import main

if __name__ == "__main__":
    sys.exit(main())
