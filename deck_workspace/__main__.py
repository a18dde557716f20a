"""Entry point for ``python -m deck_workspace``"""

from .cli import main

if __name__ == "__main__":
    main()
