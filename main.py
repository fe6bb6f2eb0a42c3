"""@brief Wrapper so `python main.py` mirrors the `passenger` console entrypoint."""

from __future__ import annotations

from passenger.cli import main


if __name__ == "__main__":  # pragma: no cover
    main()
