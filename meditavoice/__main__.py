"""Module entrypoint for running Meditavoice as ``python -m meditavoice``."""

from __future__ import annotations

from meditavoice.cli import main


if __name__ == "__main__":
    main()
