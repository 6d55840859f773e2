from .base import *  # noqa: F401,F403

DEBUG = True
ALLOWED_HOSTS = ['localhost', '127.0.0.1', 'backend']
CORS_ALLOW_ALL_ORIGINS = True
SECURE_SSL_REDIRECT = False
SECURE_HSTS_SECONDS = 0

# Keep local development off the live VIES registry unless asked for.
VIES_USE_MOCK = env.bool('VIES_USE_MOCK', default=True)
SCREENING_BATCH_DELAY_SECONDS = env.float('SCREENING_BATCH_DELAY_SECONDS', default=0.0)
