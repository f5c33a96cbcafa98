import sys

from lc3vm.cli import main

if __name__ == '__main__':
    sys.exit(main())
