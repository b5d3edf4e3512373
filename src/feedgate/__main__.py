"""Entry point for 'python -m feedgate' command."""

from feedgate.cli import main

if __name__ == "__main__":
    main()
