# neurolint/cli/commands: Command modules for the NeuroLint CLI.
#
# Each module in this package provides one or more CLI commands.

from .backups import backups, restore
from .fix import fix
from .status import status

__all__ = [
    # backups.py
    "backups",
    "restore",
    # fix.py
    "fix",
    # status.py
    "status",
]
