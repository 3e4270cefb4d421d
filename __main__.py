"""
Entry point for running pg_onboard as a module.

Usage:
    python -m pg_onboard -H localhost -U postgres
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
