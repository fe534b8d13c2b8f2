"""
Development settings - debug toolbar, browsable API and SQL logging.
"""

from .base import *

DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1', '[::1]']

INSTALLED_APPS += ['debug_toolbar']

MIDDLEWARE.insert(0, 'debug_toolbar.middleware.DebugToolbarMiddleware')

INTERNAL_IPS = ['127.0.0.1']

# Local frontends on any port
CORS_ALLOW_ALL_ORIGINS = True

REST_FRAMEWORK['DEFAULT_RENDERER_CLASSES'] = [
    'rest_framework.renderers.JSONRenderer',
    'rest_framework.renderers.BrowsableAPIRenderer',
]

# Smaller sample data set for local runs
SEED['CUSTOMER_COUNT'] = config('SEED_CUSTOMER_COUNT', default=50, cast=int)

# django.db.backends at DEBUG prints every SQL query, which shows cache hits as missing queries
LOGGING['loggers']['apps']['level'] = 'DEBUG'
LOGGING['loggers']['django.db.backends'] = {
    'handlers': ['console'],
    'level': config('SQL_LOG_LEVEL', default='DEBUG'),
    'propagate': False,
}

print(f"Records API (development): {DATABASES['default']['NAME']}@{DATABASES['default']['HOST']}, "
      f"cache {CACHES['default']['LOCATION']}")
