# Repofleet Output Module
# Rich console output and prompts

from repofleet.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
