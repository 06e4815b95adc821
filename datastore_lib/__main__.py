import sys

from datastore_lib.cli import main

sys.exit(main())
