"""Module entrypoint to run Passenger via `python -m passenger`."""

from passenger.cli import main


def run() -> None:
    """Dispatch to the console script handler."""

    main()


if __name__ == "__main__":  # pragma: no cover
    run()
