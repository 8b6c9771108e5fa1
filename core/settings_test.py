"""
Settings used by the pytest suite.

Provides safe defaults for everything core.settings requires from the
environment, then switches to SQLite, a local-memory cache and eager Celery.
"""

import os

os.environ.setdefault('SECRET_KEY', 'test-secret-key-not-for-production')
os.environ.setdefault('DEBUG', 'False')
os.environ.setdefault('DB_ENGINE', 'sqlite')
os.environ.setdefault('SECURE_SSL_REDIRECT', 'False')

from core.settings import *  # noqa: E402,F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'fims-tests',
    }
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

SMS_ENABLED = False
TERMII_API_KEY = ''
NIN_API_BASE_URL = ''
NIN_API_KEY = ''
SUPER_ADMIN_EMAILS = ['root@ccsa.test']

LOGGING['root']['level'] = 'WARNING'  # noqa: F405
