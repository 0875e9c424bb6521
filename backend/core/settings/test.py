"""
Settings for the test run.
"""
from .base import *  # noqa: F401,F403
from .base import REST_FRAMEWORK

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    "staticfiles": {
        "BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage",
    },
}

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    'DEFAULT_THROTTLE_RATES': {
        'anon': '10000/day',
        'user': '10000/day',
        'review': '10000/hour',
        'bulk_action': '10000/hour',
    },
}

APPROVAL_QUEUE_PAGE_SIZE = 12
APPROVAL_QUEUE_MAX_PAGE_SIZE = 100
BULK_ACTION_MAX_TARGETS = 100
