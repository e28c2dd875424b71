"""
probe_core — Host Telemetry Agent v1.0
======================================
Architecture: single-threaded collect → build → deliver → sleep loop.

  constants.py    → Version, defaults, ledger markers, payload schema version
  config.py       → Logging setup, Settings loaded from env / .env
  errors.py       → Exception taxonomy (config, provider, delivery, ledger)
  models.py       → Snapshot dataclasses (frozen, never mutated)
  provider.py     → Default metrics provider (psutil) + display capture (Pillow)
  payload.py      → Snapshot → wire payload dict, PNG/base64 screenshot
  http_client.py  → HTTP session with pooling + SSL CA bundle
  delivery.py     → Single JSON POST, three-way outcome classification
  ledger.py       → Persisted agent id + services/tasks to verify
  loop.py         → run_iteration() + main_loop()
  runner.py       → main(): settings, logging, ledger, loop
  cli.py          → argparse front-end (run, ledger subcommands)
"""
