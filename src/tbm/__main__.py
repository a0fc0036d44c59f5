"""Allow running tbm with ``python -m tbm``."""

import sys

from .cli import main

sys.exit(main())
