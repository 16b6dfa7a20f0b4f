"""CLI entry point: python -m genpinout"""

from genpinout.cli import main

if __name__ == "__main__":
    main()
