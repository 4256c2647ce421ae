"""Allow running fossback as ``python -m fossback``."""

from fossback.cli.main import app

if __name__ == "__main__":
    app()
