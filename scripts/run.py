#!/usr/bin/env python3
"""
Runner script for bird-tagger from a source checkout.
Usage: uv run python scripts/run.py <target_directory> --mode organize|tag
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))
from bird_tagger.cli import main

if __name__ == "__main__":
    main()
