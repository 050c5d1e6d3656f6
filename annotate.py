#!/usr/bin/env python3
"""
Cellnote - superscript and subscript annotations for spreadsheet cells

Simple usage:
    python annotate.py annotate report.xlsx -s Sheet1 -r 1 -c 1 -t "Table title" -n "1,2,3"
    python annotate.py preview "Revenue" a --position 3
"""

import sys
from pathlib import Path

# Add src to path for development
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from cellnote.cli import app

if __name__ == "__main__":
    app()
