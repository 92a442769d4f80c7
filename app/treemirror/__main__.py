"""Allow running as ``python -m treemirror``."""

from treemirror.cli.main import app

if __name__ == "__main__":
    app()
