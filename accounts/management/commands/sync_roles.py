"""
Management command to sync the default system roles to the database.

Usage:
    python manage.py sync_roles
"""

from django.core.management.base import BaseCommand
from accounts.authorization import sync_system_roles


class Command(BaseCommand):
    help = 'Create or refresh the default system roles and their permissions'

    def handle(self, *args, **options):
        self.stdout.write(self.style.MIGRATE_HEADING('Syncing system roles...'))

        result = sync_system_roles()

        self.stdout.write(
            self.style.SUCCESS(
                f'Synced roles: {result["created"]} created, {result["updated"]} updated'
            )
        )
        self.stdout.write(
            self.style.MIGRATE_LABEL(f'   - Total in database: {result["total"]} roles')
        )
