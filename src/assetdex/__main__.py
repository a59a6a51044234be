# src/assetdex/__main__.py
"""Module entry point: ``python -m assetdex``."""
import sys

from assetdex.app import main

sys.exit(main())
