"""Entry point for Poll Watch.

Usage:
    python -m poll_watch [--config PATH] [FILE ...]
"""

import sys


def main() -> None:
    """Run the headless watcher and exit with its status."""
    from poll_watch.runner import main as runner_main

    sys.exit(runner_main())


if __name__ == "__main__":
    main()
