import sys

from page.cli import main

sys.exit(main())
