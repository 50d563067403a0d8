import sys

from logguard.cli import main

sys.exit(main())
