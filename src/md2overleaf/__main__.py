"""Allow ``python -m md2overleaf``."""

from md2overleaf.ui.cli import main


if __name__ == "__main__":
    main()
