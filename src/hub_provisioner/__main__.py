"""
hub_provisioner.__main__

Entrypoint for `python -m hub_provisioner`.
"""

from __future__ import annotations

from hub_provisioner.cli import main

if __name__ == "__main__":
    raise SystemExit(main())


# --- Module Notes -----------------------------------------------------------
# In CI this is typically wrapped by a pipeline step that runs `provision`, the workload,
# then `teardown` with the same --state-file regardless of the workload's outcome.
