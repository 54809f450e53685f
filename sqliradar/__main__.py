"""
Entry point for running SQLiRadar as a module: python -m sqliradar
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
