"""Allow ``python -m reform_hub.cli`` execution (runs the schema check)."""

import sys

from reform_hub.cli.check_schema import main

sys.exit(main())
