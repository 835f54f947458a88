import sys

from telemetry_settings.main import main

sys.exit(main())
