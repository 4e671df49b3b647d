"""Allow ``python -m rstxref``."""

import sys

from rstxref.cli import main

sys.exit(main())
