"""
Test settings for GRUAPP.

SQLite ignores select_for_update(), which is fine for single-connection tests.
Set TEST_DB_ENGINE=postgresql to run against the DB_* database instead, which
also enables the concurrent payout tests.
"""

from decouple import config

from .settings import *  # noqa: F401,F403

if config('TEST_DB_ENGINE', default='sqlite') != 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
