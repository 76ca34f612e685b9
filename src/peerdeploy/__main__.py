"""Entry point for `python -m peerdeploy`."""

import sys

from peerdeploy.runner import main

if __name__ == "__main__":
    sys.exit(main())
