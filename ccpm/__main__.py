import sys

from ccpm.cli import main

sys.exit(main())
