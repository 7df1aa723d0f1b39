from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from apps.orders.models import Order
from apps.push.models import PushToken


class Command(BaseCommand):
    help = "Elimina tutti gli ordini (righe e storico inclusi) e i token push dei clienti."

    def add_arguments(self, parser):
        parser.add_argument("--yes", action="store_true", help="Conferma l'eliminazione")

    def handle(self, *args, **options):
        if not options["yes"]:
            raise CommandError("Operazione irreversibile: rilancia con --yes per confermare")
        with transaction.atomic():
            orders, _ = Order.objects.all().delete()
            tokens, _ = PushToken.objects.filter(scope=PushToken.Scope.CUSTOMER).delete()
        self.stdout.write(self.style.SUCCESS(f"OK: {orders} righe ordine eliminate, {tokens} token cliente eliminati"))
