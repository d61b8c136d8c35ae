from django.core.management.base import BaseCommand

from booking.services.directory import get_directory


class Command(BaseCommand):
    help = "Show the external hospital directory configuration and whether it answers."

    def handle(self, *args, **opts):
        directory = get_directory()
        config = directory.describe_config()
        self.stdout.write(f"url: {config['apiUrl']}")
        self.stdout.write(f"api key configured: {'yes' if config['hasApiKey'] else 'no'}")
        self.stdout.write(f"sync policy: {directory.policy}")
        if directory.is_available():
            self.stdout.write(self.style.SUCCESS("directory available"))
        else:
            self.stdout.write(self.style.WARNING("directory unavailable, serving local data only"))
