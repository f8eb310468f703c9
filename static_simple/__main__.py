"""Allow ``python -m static_simple``."""

from .cli import main

if __name__ == "__main__":
    main()
