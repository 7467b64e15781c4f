"""Entry point for the Datadog logs sink writer."""

import sys

from datadog_logs_sink.cli import main

if __name__ == "__main__":
    sys.exit(main())
