"""Test suite for snapshell."""

import os
import sys

# Add the parent directory to the path so we can import snapshell
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
