from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

User = get_user_model()


class Command(BaseCommand):
    help = 'Creates the system owner account that auto-created exam candidates are attributed to'

    def add_arguments(self, parser):
        parser.add_argument('--password', type=str, help='Password for the account (unusable if omitted)')

    def handle(self, *args, **options):
        email = settings.SYSTEM_OWNER_EMAIL
        if User.objects.filter(email=email).exists():
            self.stdout.write(self.style.WARNING(f"System owner {email} already exists"))
            return

        user = User.objects.create_user(
            username=email,
            email=email,
            password=options.get('password'),
            first_name='System',
            last_name='Owner',
            role=User.Role.ADMIN,
            is_staff=True,
        )
        self.stdout.write(self.style.SUCCESS(f"Created system owner {user.email}"))
