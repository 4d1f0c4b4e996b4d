import sys

from pscpu.run_monitor import main

if __name__ == "__main__":
    sys.exit(main())
