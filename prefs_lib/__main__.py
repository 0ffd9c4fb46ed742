import sys

from prefs_lib.cli import main

sys.exit(main())
