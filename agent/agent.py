"""
Host Telemetry Agent
====================
Samples CPU, memory, swap, disks, network interfaces, sensors, running
processes and a screenshot of the primary display every INTERVAL seconds
and POSTs them as JSON to API_URL.

Configuration comes from the environment or a .env file next to the
working directory: API_KEY (or API_PASSWORD), API_URL, INTERVAL.

Usage:
    python agent.py                      # run forever
    python agent.py run --once           # one sample, exit code = delivery outcome
    python agent.py ledger show          # agent id + verify lists
"""

import sys

from probe_core.cli import main


if __name__ == "__main__":
    sys.exit(main())
