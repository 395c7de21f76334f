"""Load wallet addresses (one per line) into a phase's allowlist.

    python manage.py load_allowlist data/addresses.txt --phase 0 --quantity 1
"""

from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from core.addresses import is_valid_address, normalize_address
from core.models import AllowlistEntry


def read_addresses(path) -> list[str]:
	"""
	Valid addresses from the file, lower-cased and de-duplicated, in file order.
	Blank lines and lines starting with '#' are skipped.
	"""
	seen = {}
	for line in Path(path).read_text(encoding="utf-8").splitlines():
		value = line.strip()
		if not value or value.startswith("#"):
			continue
		if is_valid_address(value):
			seen.setdefault(normalize_address(value), None)
	return list(seen)


@transaction.atomic
def load_addresses_into_allowlist(addresses, phase: int, quantity: int) -> tuple[int, int]:
	"""
	Upsert allowlist rows; returns (created, updated).
	"""
	created = updated = 0
	for address in addresses:
		_, was_created = AllowlistEntry.objects.update_or_create(
			address=address, phase=phase, defaults={"quantity_allowed": quantity},
		)
		if was_created:
			created += 1
		else:
			updated += 1
	return created, updated


class Command(BaseCommand):
	help = "Add wallet addresses from a file to a mint phase's allowlist"

	def add_arguments(self, parser):
		parser.add_argument("path")
		parser.add_argument("--phase", type=int, required=True)
		parser.add_argument("--quantity", type=int, default=1)

	def handle(self, path, phase, quantity, **options):
		if quantity < 0:
			raise CommandError("--quantity must be >= 0")
		try:
			addresses = read_addresses(path)
		except OSError as e:
			raise CommandError(f"Cannot read {path}: {e}")
		if not addresses:
			self.stdout.write("No addresses to load.")
			return
		created, updated = load_addresses_into_allowlist(addresses, phase, quantity)
		self.stdout.write(self.style.SUCCESS(f"Allowlist phase {phase}: {created} added, {updated} updated"))
