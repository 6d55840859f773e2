import os
from pathlib import Path

import environ

BASE_DIR = Path(__file__).resolve().parents[2]

env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, ['localhost', '127.0.0.1']),
    CORS_ALLOW_ALL_ORIGINS=(bool, False),
    API_THROTTLE_SCREENING=(str, '60/minute'),
    API_THROTTLE_VAT=(str, '120/minute'),
    API_THROTTLE_BATCH=(str, '6/minute'),
    API_THROTTLE_DEFAULT=(str, '180/minute'),
    SCREENING_PARALLEL_CHECKS=(bool, False),
    VIES_USE_MOCK=(bool, False),
)

environ.Env.read_env(os.path.join(BASE_DIR, '.env'))

SECRET_KEY = env('DJANGO_SECRET_KEY', default='django-insecure-change-me')
DEBUG = env('DEBUG')
ALLOWED_HOSTS = env.list('ALLOWED_HOSTS')
APP_VERSION = env('APP_VERSION', default='1.0.0')

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'corsheaders',
    'rest_framework',
    'screening',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

WSGI_APPLICATION = 'config.wsgi.application'

# Screening owns no durable state; the database only backs Django's own apps.
DATABASES = {
    'default': env.db_url(
        'DATABASE_URL',
        default='sqlite:///db.sqlite3',
    ),
}

CACHES = {
    'default': env.cache_url('CACHE_URL', default='locmemcache://default'),
    'vies': env.cache_url('VIES_CACHE_URL', default='locmemcache://vies'),
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_THROTTLE_CLASSES': [
        'rest_framework.throttling.ScopedRateThrottle',
    ],
    'DEFAULT_THROTTLE_RATES': {
        'screening': env('API_THROTTLE_SCREENING'),
        'vat': env('API_THROTTLE_VAT'),
        'batch': env('API_THROTTLE_BATCH'),
        'default': env('API_THROTTLE_DEFAULT'),
    },
}

CORS_ALLOW_ALL_ORIGINS = env('CORS_ALLOW_ALL_ORIGINS')
CORS_ALLOWED_ORIGINS = env.list('CORS_ALLOWED_ORIGINS', default=[])

DATA_UPLOAD_MAX_MEMORY_SIZE = env.int('DATA_UPLOAD_MAX_MEMORY_SIZE', default=1048576)

SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')
USE_X_FORWARDED_HOST = True
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = 'strict-origin-when-cross-origin'
X_FRAME_OPTIONS = 'DENY'

# Screening engine
SCREENING_ENABLED_CHECKS = env.list(
    'SCREENING_ENABLED_CHECKS',
    default=['SANCTIONS', 'EXPORT_CONTROL', 'PEP', 'ADVERSE_MEDIA', 'COUNTRY_RISK'],
)
SCREENING_PARALLEL_CHECKS = env('SCREENING_PARALLEL_CHECKS')
SCREENING_CHECK_TIMEOUT_SECONDS = env.float('SCREENING_CHECK_TIMEOUT_SECONDS', default=10.0)
SCREENING_REVIEW_INTERVAL_DAYS = env.int('SCREENING_REVIEW_INTERVAL_DAYS', default=365)
SCREENING_HIGH_RISK_REVIEW_INTERVAL_DAYS = env.int('SCREENING_HIGH_RISK_REVIEW_INTERVAL_DAYS', default=182)
SCREENING_BATCH_DELAY_SECONDS = env.float('SCREENING_BATCH_DELAY_SECONDS', default=1.0)
SCREENING_BATCH_MAX_ITEMS = env.int('SCREENING_BATCH_MAX_ITEMS', default=100)
SCREENING_DATA_FILE = env('SCREENING_DATA_FILE', default='')
SCREENING_PEP_SCORER = env('SCREENING_PEP_SCORER', default='')

# VIES registry
VIES_API_URL = env('VIES_API_URL', default='https://ec.europa.eu/taxation_customs/vies/rest-api')
VIES_TIMEOUT_SECONDS = env.float('VIES_TIMEOUT_SECONDS', default=10.0)
VIES_RETRY_ATTEMPTS = env.int('VIES_RETRY_ATTEMPTS', default=2)
VIES_RETRY_BACKOFF_SECONDS = env.float('VIES_RETRY_BACKOFF_SECONDS', default=1.0)
VIES_CACHE_ALIAS = 'vies'
VIES_CACHE_TTL_SECONDS = env.int('VIES_CACHE_TTL_SECONDS', default=86400)
VIES_USE_MOCK = env('VIES_USE_MOCK')
VIES_BATCH_DELAY_SECONDS = env.float('VIES_BATCH_DELAY_SECONDS', default=0.2)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': env('LOG_LEVEL', default='INFO'),
    },
    'loggers': {
        'screening': {
            'handlers': ['console'],
            'level': env('SCREENING_LOG_LEVEL', default='INFO'),
            'propagate': False,
        },
    },
}
