"""``python -m refledger.main`` entry point."""

from __future__ import annotations

from refledger.ui.cli import run

if __name__ == "__main__":
    run()
