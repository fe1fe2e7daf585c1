"""InsightPilot."""

import sys

from insightpilot.adapters.inbound.cli import main


if __name__ == "__main__":
    sys.exit(main())
