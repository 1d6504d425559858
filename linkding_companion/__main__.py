import sys

from linkding_companion.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
