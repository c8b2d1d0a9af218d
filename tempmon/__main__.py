import sys

from tempmon.main import main

sys.exit(main())
