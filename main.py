"""
Main entry point for Hoxy, the local development static-content server.
Run from the directory to serve, e.g. `python main.py --port 3000 --live-reload enable`.
"""

import sys

from hoxy.cli import main

if __name__ == "__main__":
    sys.exit(main())
