# products/management/commands/reconcile_stock.py

"""
Report (and optionally repair) cached stock drift.

Product.current_stock must always equal the sum of its batches'
remaining_quantity. This command lists every product where it does not and,
with --fix, re-derives the cache through BatchLedger.recompute_stock().
"""

from django.core.management.base import BaseCommand

from products.services import get_ledger


class Command(BaseCommand):
    help = "Detect products whose current_stock disagrees with their batches"

    def add_arguments(self, parser):
        parser.add_argument(
            "--fix",
            action="store_true",
            help="Recompute current_stock from batches for drifting products",
        )

    def handle(self, *args, **options):
        ledger = get_ledger()
        drift = ledger.find_stock_drift()

        if not drift:
            self.stdout.write(self.style.SUCCESS("No stock drift detected."))
            return

        for product, cached, actual in drift:
            self.stdout.write(
                self.style.WARNING(
                    f"{product.sku}: cached={cached} batches={actual}"
                )
            )

        if not options["fix"]:
            self.stdout.write(
                self.style.WARNING(f"{len(drift)} product(s) drifting; rerun with --fix.")
            )
            return

        for product, _, _ in drift:
            ledger.recompute_stock(product.id)

        self.stdout.write(self.style.SUCCESS(f"Repaired {len(drift)} product(s)."))
