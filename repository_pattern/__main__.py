import sys

from repository_pattern.cli import main


sys.exit(main())
