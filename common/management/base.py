"""
Shared base command class for management commands.

Provides the --dry-run and --json argument patterns and the timing and
JSON output helpers used by maintenance commands.
"""

import json
import time

from django.core.management.base import BaseCommand


class FileSlotsBaseCommand(BaseCommand):
    """
    Base command for maintenance commands.

    Subclasses opt in to common arguments with class attributes:
        supports_dry_run = True: adds --dry-run flag
        supports_json = True: adds --json flag
    """

    supports_dry_run = False
    supports_json = False

    def add_arguments(self, parser):
        if self.supports_dry_run:
            parser.add_argument(
                "--dry-run",
                action="store_true",
                help="Report what would be deleted without deleting anything",
            )
        if self.supports_json:
            parser.add_argument(
                "--json",
                action="store_true",
                dest="json_output",
                help="Output results as JSON",
            )

    def output_json(self, data):
        """Write data as formatted JSON to stdout."""
        self.stdout.write(json.dumps(data, indent=2, default=str))

    def start_timer(self):
        self._start_time = time.monotonic()

    def elapsed(self):
        """Return seconds since start_timer()."""
        return time.monotonic() - getattr(self, "_start_time", time.monotonic())
