import sys

from ems_client.cli import main

sys.exit(main())
