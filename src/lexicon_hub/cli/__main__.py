"""Entry point for ``python -m lexicon_hub.cli``."""

import sys

from lexicon_hub.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
