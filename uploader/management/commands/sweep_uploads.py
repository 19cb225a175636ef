"""Delete orphaned slot files and report rows pointing at missing files."""

from common.management.base import FileSlotsBaseCommand

from uploader.services.sweep import sweep_orphaned_files


class Command(FileSlotsBaseCommand):
    help = "Delete upload files no row references and report dangling references."

    supports_dry_run = True
    supports_json = True

    def add_arguments(self, parser):
        super().add_arguments(parser)
        parser.add_argument(
            "--grace-hours",
            type=float,
            default=None,
            help="Only consider files older than this many hours",
        )

    def handle(self, *args, **options):
        self.start_timer()
        result = sweep_orphaned_files(
            grace_hours=options["grace_hours"],
            dry_run=options["dry_run"],
        )

        if options["json_output"]:
            self.output_json(result)
            return

        if options["dry_run"]:
            for orphan in result["orphans"]:
                self.stdout.write(f"would delete {orphan['directory']}/{orphan['name']}")
            self.stdout.write(
                f"{len(result['orphans'])} orphaned file(s), "
                f"{result['dangling']} dangling reference(s)."
            )
            return

        self.stdout.write(
            self.style.SUCCESS(
                f"Deleted {result['deleted']} orphaned file(s), "
                f"{result['failed']} failed, "
                f"{result['dangling']} dangling reference(s) "
                f"in {self.elapsed():.2f}s."
            )
        )
