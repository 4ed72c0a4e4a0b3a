"""
Django settings for the bloodbankapi project.

Values come from the environment; ``manage.py``, ``wsgi.py``, ``asgi.py``
and ``celery.py`` load a local ``.env`` file before this module is imported.
"""

import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name: str, default: bool = False) -> bool:
    return (os.getenv(name) or str(default)).strip().lower() in {'1', 'true', 'yes', 'on'}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-bloodbank-dev-key')

DEBUG = _env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = [host.strip() for host in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if host.strip()]


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'blood',
    'donor',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'bloodbankapi.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'bloodbankapi.wsgi.application'


DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('DATABASE_PATH', str(BASE_DIR / 'db.sqlite3')),
        # SQLite ignores SELECT ... FOR UPDATE; writers take the database lock at BEGIN instead.
        'OPTIONS': {
            'transaction_mode': 'IMMEDIATE',
            'timeout': int(os.getenv('DATABASE_TIMEOUT', '20')),
        },
        'TEST': {
            'NAME': os.getenv('TEST_DATABASE_PATH', str(BASE_DIR / 'test_db.sqlite3')),
        },
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


LANGUAGE_CODE = 'en-us'

TIME_ZONE = os.getenv('TIME_ZONE', 'UTC')

USE_I18N = True

USE_TZ = True


STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# Blood bank policy
DONATION_RECOVERY_DAYS = _env_int('DONATION_RECOVERY_DAYS', 56)
STOCK_LOW_MULTIPLIER = _env_int('STOCK_LOW_MULTIPLIER', 2)
REQUEST_OVERDUE_HOURS = _env_int('REQUEST_OVERDUE_HOURS', 24)
RECENT_REQUEST_DAYS = _env_int('RECENT_REQUEST_DAYS', 7)
RECENT_DONOR_DAYS = _env_int('RECENT_DONOR_DAYS', 30)
DEFAULT_MINIMUM_STOCK = _env_int('DEFAULT_MINIMUM_STOCK', 5)
DEFAULT_MAXIMUM_CAPACITY = _env_int('DEFAULT_MAXIMUM_CAPACITY', 100)
MAX_UNITS_PER_ADJUSTMENT = _env_int('MAX_UNITS_PER_ADJUSTMENT', 50)


# Celery
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'memory://')
CELERY_TASK_ALWAYS_EAGER = _env_bool('CELERY_TASK_ALWAYS_EAGER', True)
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_TIMEZONE = TIME_ZONE
CELERY_BEAT_SCHEDULE = {
    'record-system-health': {
        'task': 'blood.tasks.record_system_health',
        'schedule': timedelta(minutes=15),
    },
}


LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'blood': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'donor': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
    },
}
