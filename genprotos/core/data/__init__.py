"""
Packaged data files.

``generation.yml`` holds the default generation tables.
"""

from pathlib import Path

DATA_DIR = Path(__file__).parent
DEFAULT_GENERATION_CONFIG = DATA_DIR / "generation.yml"
