"""
Puts src/ on sys.path so tests import chat_context without an install.

conftest.py is loaded by pytest before any test module in this directory.
"""

import sys
from pathlib import Path

src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))
