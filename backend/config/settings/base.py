"""
Base settings for CoachDesk project.
"""
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-change-this-in-production')

DEBUG = os.environ.get('DEBUG', 'True').lower() in ('true', '1', 'yes')

ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third party apps
    'corsheaders',
    'rest_framework',

    # Local apps
    'apps.users',
    'apps.clients',
    'apps.checkins',
    'apps.insights',
]

MIDDLEWARE = [
    'config.api.middleware.RequestIdMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'config.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('DB_NAME', 'coachdesk'),
        'USER': os.environ.get('DB_USER', 'coachdesk'),
        'PASSWORD': os.environ.get('DB_PASSWORD', 'coachdesk'),
        'HOST': os.environ.get('DB_HOST', 'localhost'),
        'PORT': os.environ.get('DB_PORT', '5432'),
    }
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'config.api.authentication.JWTAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'EXCEPTION_HANDLER': 'config.api.exceptions.exception_handler',
    'UNAUTHENTICATED_USER': None,
}

# CORS settings - allow all origins in development, override in production
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_CREDENTIALS = True
CORS_ALLOW_HEADERS = [
    'accept',
    'accept-encoding',
    'authorization',
    'content-type',
    'origin',
    'user-agent',
    'x-requested-with',
    'x-request-id',
    'idempotency-key',
]
CORS_EXPOSE_HEADERS = [
    'x-request-id',
    'retry-after',
    'idempotent-replayed',
]
CORS_ALLOW_METHODS = [
    'GET',
    'OPTIONS',
    'POST',
]

# Auth (tokens are issued elsewhere, verified here)
JWT_SECRET = os.environ.get('JWT_SECRET', SECRET_KEY)

# Infrastructure settings
USE_FAKES = os.environ.get('USE_FAKES', 'False').lower() in ('true', '1', 'yes')

_redis_host = os.environ.get('REDIS_HOST', 'localhost')
_redis_port = os.environ.get('REDIS_PORT', '6379')
_redis_password = os.environ.get('REDIS_PASSWORD', '')
REDIS_URL = os.environ.get('REDIS_URL', f'redis://:{_redis_password}@{_redis_host}:{_redis_port}/0' if _redis_password else f'redis://{_redis_host}:{_redis_port}/0')
REDIS_CONNECT_TIMEOUT = float(os.environ.get('REDIS_CONNECT_TIMEOUT', 5))
REDIS_SOCKET_TIMEOUT = float(os.environ.get('REDIS_SOCKET_TIMEOUT', 5))

_rabbitmq_host = os.environ.get('RABBITMQ_HOST', 'localhost')
_rabbitmq_port = os.environ.get('RABBITMQ_PORT', '5672')
_rabbitmq_user = os.environ.get('RABBITMQ_USER', 'guest')
_rabbitmq_password = os.environ.get('RABBITMQ_PASSWORD', 'guest')
RABBITMQ_URL = os.environ.get('RABBITMQ_URL', f'amqp://{_rabbitmq_user}:{_rabbitmq_password}@{_rabbitmq_host}:{_rabbitmq_port}/')

# Insight jobs
INSIGHT_QUEUE_NAME = os.environ.get('INSIGHT_QUEUE_NAME', 'insights')
INSIGHT_WORKER_CONCURRENCY = int(os.environ.get('INSIGHT_WORKER_CONCURRENCY', 5))
INSIGHT_JOB_MAX_ATTEMPTS = int(os.environ.get('INSIGHT_JOB_MAX_ATTEMPTS', 3))
INSIGHT_JOB_RETENTION_SECONDS = int(os.environ.get('INSIGHT_JOB_RETENTION_SECONDS', 3600))
INSIGHT_SCAN_PAGE_SIZE = int(os.environ.get('INSIGHT_SCAN_PAGE_SIZE', 100))
INSIGHT_SCAN_MAX_PAGES = int(os.environ.get('INSIGHT_SCAN_MAX_PAGES', 50))

# Caches
INSIGHTS_CACHE_TTL_SECONDS = int(os.environ.get('INSIGHTS_CACHE_TTL_SECONDS', 600))
CHECKINS_VERSION_TTL_SECONDS = int(os.environ.get('CHECKINS_VERSION_TTL_SECONDS', 30 * 24 * 3600))
CHECKINS_CACHE_TTL_MIN_SECONDS = int(os.environ.get('CHECKINS_CACHE_TTL_MIN_SECONDS', 60))
CHECKINS_CACHE_TTL_MAX_SECONDS = int(os.environ.get('CHECKINS_CACHE_TTL_MAX_SECONDS', 180))

# Idempotency
IDEMPOTENCY_TTL_SECONDS = int(os.environ.get('IDEMPOTENCY_TTL_SECONDS', 24 * 3600))
IDEMPOTENCY_LOCK_TTL_SECONDS = int(os.environ.get('IDEMPOTENCY_LOCK_TTL_SECONDS', 60))

# Rate limiting (insight enqueue, per user)
INSIGHTS_RATE_LIMIT_MAX = int(os.environ.get('INSIGHTS_RATE_LIMIT_MAX', 10))
INSIGHTS_RATE_LIMIT_WINDOW_SECONDS = int(os.environ.get('INSIGHTS_RATE_LIMIT_WINDOW_SECONDS', 60))

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

# Sentry configuration
SENTRY_DSN = os.environ.get('SENTRY_DSN', '')
if SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.django import DjangoIntegration
    sentry_sdk.init(
        dsn=SENTRY_DSN,
        integrations=[DjangoIntegration()],
        traces_sample_rate=0.1,
        send_default_pii=False,
        environment=os.environ.get('ENVIRONMENT', 'development'),
    )
