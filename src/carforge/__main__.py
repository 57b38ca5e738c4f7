import sys

from carforge.app import main

sys.exit(main())
