"""Allow running the decoder as ``python -m gattprofiles``."""

import sys

from .cli import main

sys.exit(main())
