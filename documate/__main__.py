"""Allow ``python -m documate``."""

import sys

from .cli import main

main(sys.argv[1:])
