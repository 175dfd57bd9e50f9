"""Module entrypoint for ``python -m whid``."""

from .cli import main


if __name__ == "__main__":
    main()
