import sys

from gitpromote.cli._dispatcher import main

sys.exit(main())
