from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

User = get_user_model()


class Command(BaseCommand):
    help = 'Creates the default admin user when no user exists yet'

    def add_arguments(self, parser):
        parser.add_argument('--username', default=settings.SHOPLEDGER_DEFAULT_ADMIN_USERNAME)
        parser.add_argument('--password', default=settings.SHOPLEDGER_DEFAULT_ADMIN_PASSWORD)

    def handle(self, *args, **options):
        if User.objects.exists():
            self.stdout.write("Users already exist, nothing to do.")
            return

        User.objects.create_superuser(
            username=options['username'],
            email='',
            password=options['password'],
        )
        self.stdout.write(self.style.SUCCESS(f"Created admin user '{options['username']}'."))
        self.stdout.write(self.style.WARNING("Change the default password before exposing the API on a network."))
