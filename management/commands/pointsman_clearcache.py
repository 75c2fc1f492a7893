"""Management command to wipe the device cache."""

from django.core.management.base import BaseCommand

from pointsman.services.cache import PersistedCache


class Command(BaseCommand):
    help = "Clear the Pointsman cache alias, including the last-sync marker"

    def add_arguments(self, parser):
        parser.add_argument(
            "--alias",
            default=None,
            help="Override CACHE_ALIAS setting",
        )

    def handle(self, *args, **options):
        cache = PersistedCache(alias=options["alias"])
        if cache.clear_all():
            self.stdout.write(self.style.SUCCESS(f"Cleared cache alias '{cache.alias}'."))
        else:
            self.stderr.write(self.style.ERROR(f"Could not clear cache alias '{cache.alias}'."))
