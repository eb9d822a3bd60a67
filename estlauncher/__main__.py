import sys

from estlauncher.config import main

sys.exit(main())
