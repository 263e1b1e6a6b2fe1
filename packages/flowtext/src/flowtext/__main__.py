"""Entry point for running flowtext as a module."""

from flowtext.cli.main import main

if __name__ == "__main__":
    main()
