import sys

from usertrack.cli import main

if __name__ == "__main__":
    sys.exit(main())
