import sys

from omb_remote_write.main import main

sys.exit(main())
