"""Entry point for running SOPGen as a module.

Usage:
    python -m sopgen [command] [options]

Example:
    python -m sopgen departments --data-dir data
    python -m sopgen render biotech autoclave --output sop.html
"""

from sopgen.cli import app

if __name__ == "__main__":
    app()
