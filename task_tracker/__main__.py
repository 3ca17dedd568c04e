import sys

from task_tracker.cli import main

sys.exit(main())
