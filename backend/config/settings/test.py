from .base import *  # noqa: F401,F403

DEBUG = False
SECURE_SSL_REDIRECT = False
SECURE_HSTS_SECONDS = 0

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    },
}

CACHES = {
    'default': {'BACKEND': 'django.core.cache.backends.locmem.LocMemCache', 'LOCATION': 'test-default'},
    'vies': {'BACKEND': 'django.core.cache.backends.locmem.LocMemCache', 'LOCATION': 'test-vies'},
}

# Tests never reach the live registry; HTTP calls are patched per test.
VIES_USE_MOCK = False
VIES_API_URL = 'https://vies.test/rest-api'
VIES_RETRY_BACKOFF_SECONDS = 0.0
SCREENING_BATCH_DELAY_SECONDS = 0.0
VIES_BATCH_DELAY_SECONDS = 0.0
SCREENING_DATA_FILE = ''
SCREENING_PEP_SCORER = ''

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    'DEFAULT_THROTTLE_RATES': {
        'screening': '10000/minute',
        'vat': '10000/minute',
        'batch': '10000/minute',
        'default': '10000/minute',
    },
}
