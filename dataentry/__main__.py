#!/usr/bin/env python3
"""
dataentry main entry point for running as a module: python3 -m dataentry
"""

import sys
from dataentry.cli import main

if __name__ == '__main__':
    sys.exit(main())
