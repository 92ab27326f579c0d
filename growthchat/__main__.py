"""Allow running growthchat as a module: python -m growthchat."""

from .cli import main

if __name__ == "__main__":
    main()
