"""Allow `python -m gridchart`."""

from gridchart.cli import main

if __name__ == "__main__":
    main()
