import sys

from builder_stamp.runner import main

sys.exit(main())
