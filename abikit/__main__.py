import sys

from abikit.cli import main

sys.exit(main())
