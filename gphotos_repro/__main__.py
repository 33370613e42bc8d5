import sys

from gphotos_repro.cli import main

sys.exit(main())
