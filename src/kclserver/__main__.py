import sys

from kclserver.cli import main

sys.exit(main())
