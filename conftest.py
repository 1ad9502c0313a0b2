"""Test configuration for ensuring package imports."""

import os
import sys

# Make ``roster_bot`` importable from a plain checkout, the same way
# ``python -m pytest`` would when run from the repository root.
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)
