"""
Django management command to verify the cache backend.

Usage:
    python manage.py check_cache
"""
from django.core.management.base import BaseCommand, CommandError
from django.core.cache import cache
from django.conf import settings

from kwentamo.core.cache_utils import get_cached_dashboard, cache_dashboard, invalidate_dashboard_cache

SMOKE_TEST_USER_ID = -1


class Command(BaseCommand):
    help = 'Check the cache configuration and the dashboard cache round trip'

    def handle(self, *args, **options):
        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS("Cache Configuration Check"))
        self.stdout.write("=" * 60)
        self.stdout.write(f"Backend: {settings.CACHES['default']['BACKEND']}")
        self.stdout.write(f"Location: {settings.CACHES['default'].get('LOCATION', 'N/A')}")

        cache.set('kwentamo_check_key', 'ok', 60)
        if cache.get('kwentamo_check_key') != 'ok':
            raise CommandError('Cache SET/GET failed')
        cache.delete('kwentamo_check_key')
        self.stdout.write(self.style.SUCCESS("Cache SET/GET/DELETE: ok"))

        _data, key = get_cached_dashboard(SMOKE_TEST_USER_ID)
        cache_dashboard(key, {'smoke_test': True}, ttl=60)
        cached, _key = get_cached_dashboard(SMOKE_TEST_USER_ID)
        if cached != {'smoke_test': True}:
            raise CommandError('Dashboard cache round trip failed')
        invalidate_dashboard_cache(SMOKE_TEST_USER_ID)
        if get_cached_dashboard(SMOKE_TEST_USER_ID)[0] is not None:
            raise CommandError('Dashboard cache invalidation failed')
        self.stdout.write(self.style.SUCCESS("Dashboard cache: ok"))
