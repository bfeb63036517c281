import os
from pathlib import Path

PROJECT_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('TEMPLATE_EDITOR_SECRET_KEY', 'local-template-editor-not-secret')
DEBUG = os.environ.get('TEMPLATE_EDITOR_DEBUG', '1') == '1'
ALLOWED_HOSTS = ['localhost', '127.0.0.1', 'testserver']

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'rest_framework',
    'template_editor',
]

MIDDLEWARE = [
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'editor_service.urls'
WSGI_APPLICATION = 'editor_service.wsgi.application'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': PROJECT_DIR / 'template_editor.sqlite3',
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
USE_TZ = True
TIME_ZONE = 'UTC'

# Single-user local tool: no authentication on the API
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'UNAUTHENTICATED_USER': None,
}

TEMPLATE_EDITOR = {
    'BASE_DIR': os.environ.get('TEMPLATE_EDITOR_BASE_DIR', str(PROJECT_DIR)),
    'BACKUP_DIR': os.environ.get('TEMPLATE_EDITOR_BACKUP_DIR', 'Data/TemplateBackups'),
}

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
    'loggers': {
        'template_editor': {
            'handlers': ['console'],
            'level': os.environ.get('TEMPLATE_EDITOR_LOG_LEVEL', 'INFO'),
        },
    },
}
