"""Allow running rss2sample with ``python -m rss2sample``."""

import sys

from .main import main

sys.exit(main())
