import sys

from setup_data.cli import main

sys.exit(main())
