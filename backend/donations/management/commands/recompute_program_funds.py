from django.core.management.base import BaseCommand, CommandError

from donations.ledger import recompute_all_program_funds, recompute_program_fund
from programs.models import Program


class Command(BaseCommand):
    help = "Recompute Program.collected_amount from successful donations (all programs by default)."

    def add_arguments(self, parser):
        parser.add_argument("--program", type=int, help="Only this program id")

    def handle(self, *args, **opts):
        program_id = opts.get("program")
        if program_id:
            if not Program.objects.filter(pk=program_id).exists():
                raise CommandError(f"Program {program_id} does not exist.")
            total = recompute_program_fund(program_id)
            self.stdout.write(self.style.SUCCESS(f"Program {program_id}: {total}"))
            return
        n = recompute_all_program_funds()
        self.stdout.write(self.style.SUCCESS(f"Recomputed {n} programs."))
