"""Allow ``python -m newsrag.cli`` execution."""

import sys

from newsrag.cli.stages import main

sys.exit(main())
