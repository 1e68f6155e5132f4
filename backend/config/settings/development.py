"""
Development settings for CoachDesk project.
"""
from .base import *

DEBUG = True

ALLOWED_HOSTS = ['*']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'coachdesk'),
        'USER': os.environ.get('DB_USER', 'coachdesk'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'coachdesk'),
        'HOST': os.environ.get('DB_HOST', 'db'),
        'PORT': os.environ.get('DB_PORT', '5432'),
    }
}
STATIC_ROOT = os.getenv("STATIC_ROOT", os.path.join(BASE_DIR, "staticfiles"))

# Logging configuration for development (colored, human readable)
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'filters': {
        'request_context': {
            '()': 'infrastructure.logging.RequestContextFilter',
        },
    },
    'formatters': {
        'dev': {
            '()': 'infrastructure.logging.DevelopmentFormatter',
        },
    },
    'handlers': {
        'console': {
            'level': LOG_LEVEL,
            'class': 'logging.StreamHandler',
            'formatter': 'dev',
            'filters': ['request_context'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'pika': {'level': 'WARNING'},
        'redis': {'level': 'WARNING'},
    },
}
