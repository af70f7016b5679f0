"""kamalx: a live terminal dashboard for Kamal deployments.

Wraps ``kamal`` and splits its output into three panes:
  - Progress bar over the nine deploy stages, with a blinking cursor
  - Stage history (one line per stage banner)
  - Command outputs, colored by record type (remote command started /
    finished, debug, info, raw)
"""

import logging

__version__ = "0.1.0"
__description__ = "Live terminal dashboard for Kamal deployments"

# Library code never configures handlers; the CLI attaches a file handler
# when --log-file is given.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ["__version__"]
