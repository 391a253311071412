"""Entry point for the bookclub CLI.

Lets the dev server run builds as ``python -m bookclub build``.
"""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
