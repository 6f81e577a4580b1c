"""Process Entry Point - Root Module.

Thin wrapper so the relay can be started with ``python main.py``.
It imports from the quake_notifier package.
"""

import sys

from quake_notifier.main import main

if __name__ == "__main__":
    sys.exit(main())
