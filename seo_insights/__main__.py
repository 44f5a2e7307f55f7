"""Allow running as `python -m seo_insights`."""

import sys

from .cli import main

sys.exit(main())
