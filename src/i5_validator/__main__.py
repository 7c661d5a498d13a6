import sys

from i5_validator.cli.main import main

sys.exit(main())
