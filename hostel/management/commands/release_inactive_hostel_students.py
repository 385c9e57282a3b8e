from django.core.management.base import BaseCommand

from hostel.services import release_inactive_students


class Command(BaseCommand):
    help = 'Release hostel beds held by students whose records are inactive'

    def handle(self, *args, **options):
        released = release_inactive_students()
        self.stdout.write(self.style.SUCCESS(f'Released {released} assignment(s)'))
