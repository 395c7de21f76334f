"""Poll-mode reconciliation: resolve pending mints against the minting provider.

    python manage.py reconcile_mints              # one pass
    python manage.py reconcile_mints --every 60   # run forever on a schedule
    python manage.py reconcile_mints --every      # ... every RECONCILE_INTERVAL_SECONDS
"""

from apscheduler.schedulers.blocking import BlockingScheduler
from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import close_old_connections

from core.reconciliation import reconcile_pending_mints


def _run_pass():
	close_old_connections()
	reconcile_pending_mints()


class Command(BaseCommand):
	help = "Query the minting provider for pending mints and record their outcome"

	def add_arguments(self, parser):
		parser.add_argument(
			"--every", type=int, nargs="?", default=0, const=settings.RECONCILE_INTERVAL_SECONDS,
			help="Repeat every N seconds (default RECONCILE_INTERVAL_SECONDS) instead of running once",
		)

	def handle(self, *args, every=0, **options):
		if not every:
			summary = reconcile_pending_mints()
			self.stdout.write(self.style.SUCCESS(f"Reconciled: {summary}"))
			return

		scheduler = BlockingScheduler()
		scheduler.add_job(_run_pass, "interval", seconds=every, max_instances=1, coalesce=True)
		self.stdout.write(f"Reconciling pending mints every {every}s")
		try:
			scheduler.start()
		except (KeyboardInterrupt, SystemExit):
			scheduler.shutdown(wait=False)
