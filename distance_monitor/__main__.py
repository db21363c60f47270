import sys

from distance_monitor.main import main

if __name__ == "__main__":
    sys.exit(main())
