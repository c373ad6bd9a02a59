import sys

from telemetry_pusher.cli import main

sys.exit(main())
