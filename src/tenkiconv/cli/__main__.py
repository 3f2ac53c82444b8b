"""Entry point for ``python -m tenkiconv.cli``."""

from tenkiconv.cli.main import main

if __name__ == "__main__":  # pragma: no cover
    main()
