"""Entry point for python -m solvanity."""

import sys


def main():
    from solvanity.runner import main as runner_main
    sys.exit(runner_main())


if __name__ == "__main__":
    main()
