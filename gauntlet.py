#!/usr/bin/env python3
"""
wpt-gauntlet CLI - Batch WebPageTest runner

Commands:
    gauntlet run             Start tests, wait for them, download results
    gauntlet config show     Show resolved configuration

Requires WPT_APIKEY in the environment (or in .env).
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from cli import main


if __name__ == "__main__":
    sys.exit(main())
