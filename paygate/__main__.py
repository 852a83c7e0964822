import sys

from paygate.main import main

sys.exit(main())
