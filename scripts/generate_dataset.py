#!/usr/bin/env python
"""
Generate the elderly-care market CSV from a source checkout.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from caremarket.cli import main  # noqa: E402


if __name__ == "__main__":
    sys.exit(main())
