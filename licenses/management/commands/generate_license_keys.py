"""
Django management command to generate unique license keys.

Keys are checked against the key registry but not recorded in it; record
them by provisioning or regenerating a license.
"""

import logging
import time
from datetime import datetime, timezone

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError

from core.domain.exceptions import DomainException
from core.domain.value_objects import KeyStrategy
from licenses.application.services.licensing import build_key_generator
from licenses.domain.key_generator import MAX_BATCH_SIZE, LicenseKeyGenerator

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Command to generate license keys with a chosen strategy."""

    help = "Generate unique license keys using various strategies"

    def add_arguments(self, parser):
        """Add command arguments."""
        parser.add_argument("--count", type=int, default=1, help="Number of keys to generate")
        parser.add_argument(
            "--strategy",
            default=KeyStrategy.STANDARD.value,
            choices=[s.value for s in KeyStrategy],
            help="Generation strategy",
        )
        parser.add_argument("--prefix", default=None, help="License key prefix")
        parser.add_argument("--segment-length", type=int, default=None)
        parser.add_argument("--segments", type=int, default=None)
        parser.add_argument("--length", type=int, default=None, help="Block length for compact keys")
        parser.add_argument("--format", default=None, help="Template for the custom strategy")
        parser.add_argument("--output", default=None, help="File to write the generated keys to")
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Show what would be generated without generating",
        )
        parser.add_argument(
            "--validate", action="store_true", help="Validate the format of generated keys"
        )

    @staticmethod
    def _options(options):
        mapping = {
            "prefix": options["prefix"],
            "segment_length": options["segment_length"],
            "segments": options["segments"],
            "length": options["length"],
            "format": options["format"],
        }
        return {name: value for name, value in mapping.items() if value is not None}

    def handle(self, *args, **options):
        """Execute the command."""
        count = options["count"]
        strategy = options["strategy"]
        key_options = self._options(options)

        if not 1 <= count <= MAX_BATCH_SIZE:
            raise CommandError(f"--count must be between 1 and {MAX_BATCH_SIZE}")
        if strategy == KeyStrategy.CUSTOM.value and not key_options.get("format"):
            raise CommandError("--format is required for the custom strategy")

        if options["dry_run"]:
            # pylint: disable=no-member
            self.stdout.write(
                self.style.WARNING(
                    f"DRY RUN - Would generate {count} license key(s) with strategy: {strategy}"
                )
            )
            for name, value in key_options.items():
                self.stdout.write(f"  {name}: {value}")
            return

        generator = build_key_generator()
        started = time.monotonic()
        try:
            keys = async_to_sync(generator.generate_multiple)(count, strategy, key_options)
        except DomainException as e:
            logger.error(
                "Failed to generate license keys via management command",
                extra={"count": count, "strategy": strategy, "error": e.message},
            )
            raise CommandError(f"Failed to generate license keys: {e.message}") from e
        duration = round(time.monotonic() - started, 2)

        self.stdout.write(f"Generated {len(keys)} license key(s) in {duration} seconds")
        self.stdout.write("-" * 50)
        for index, key in enumerate(keys, start=1):
            self.stdout.write(f"{index:3d}. {key}")
        self.stdout.write("-" * 50)

        if options["validate"]:
            invalid = [
                key
                for key in keys
                if not LicenseKeyGenerator.validate_format(key, strategy, key_options)
            ]
            if invalid:
                for key in invalid:
                    self.stderr.write(f"  Invalid: {key}")
                raise CommandError(f"{len(invalid)} of {len(keys)} keys failed validation")
            # pylint: disable=no-member
            self.stdout.write(self.style.SUCCESS(f"All {len(keys)} keys are valid"))

        if options["output"]:
            with open(options["output"], "w", encoding="utf-8") as handle:
                handle.write("# Generated License Keys\n")
                handle.write(f"# Generated at: {datetime.now(timezone.utc).isoformat()}\n")
                handle.write(f"# Count: {len(keys)}\n\n")
                for index, key in enumerate(keys, start=1):
                    handle.write(f"{index}. {key}\n")
            self.stdout.write(f"License keys saved to: {options['output']}")

        logger.info(
            "License keys generated via management command",
            extra={"count": len(keys), "strategy": strategy, "duration": duration},
        )
