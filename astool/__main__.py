import sys

from astool.cli import main

sys.exit(main())
