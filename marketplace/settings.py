"""
Django settings for the marketplace project.

Values are read from the environment (a local .env file is loaded first).
"""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_int(name, default):
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


TESTING = 'test' in sys.argv or 'pytest' in sys.argv[0]

SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-marketplace-dev-key')

DEBUG = env_bool('DEBUG', False)

ALLOWED_HOSTS = [h.strip() for h in os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h.strip()]


INSTALLED_APPS = [
    'daphne',
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'channels',
    'profiles',
    'products',
    'conversations.apps.ConversationsConfig',
    'negotiations.apps.NegotiationsConfig',
    'notifications.apps.NotificationsConfig',
    'cart.apps.CartConfig',
    'orders.apps.OrdersConfig',
    'chatbot.apps.ChatbotConfig',
    'websocket_chat.apps.WebsocketChatConfig',
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

ROOT_URLCONF = 'marketplace.urls'

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

ASGI_APPLICATION = 'marketplace.asgi.application'


# Database

if os.getenv('DATABASE_ENGINE', 'sqlite') == 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('DATABASE_NAME', 'marketplace'),
            'USER': os.getenv('DATABASE_USER', 'postgres'),
            'PASSWORD': os.getenv('DATABASE_PASSWORD', ''),
            'HOST': os.getenv('DATABASE_HOST', 'localhost'),
            'PORT': os.getenv('DATABASE_PORT', '5432'),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Cache and channel layers

REDIS_URL = os.getenv('REDIS_URL')

if REDIS_URL and not TESTING:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.redis.RedisCache',
            'LOCATION': REDIS_URL,
        }
    }
    CHANNEL_LAYERS = {
        'default': {
            'BACKEND': 'channels_redis.core.RedisChannelLayer',
            'CONFIG': {'hosts': [REDIS_URL]},
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'marketplace',
        }
    }
    CHANNEL_LAYERS = {
        'default': {
            'BACKEND': 'channels.layers.InMemoryChannelLayer',
        }
    }


# REST framework

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'marketplace.authentication.JWTAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_PAGINATION_CLASS': 'marketplace.pagination.StandardResultsSetPagination',
    'PAGE_SIZE': 50,
    'EXCEPTION_HANDLER': 'marketplace.exceptions.api_exception_handler',
    'UNAUTHENTICATED_USER': None,
}


# Authentication collaborator (bearer JWT)

JWT_SECRET = os.getenv('JWT_SECRET', 'test_jwt_secret_key')
JWT_ALGORITHM = os.getenv('JWT_ALGORITHM', 'HS256')
JWT_AUDIENCE = os.getenv('JWT_AUDIENCE') or None
JWT_ISSUER = os.getenv('JWT_ISSUER') or None


# WebSocket limits

WEBSOCKET_MAX_MESSAGE_SIZE = env_int('WEBSOCKET_MAX_MESSAGE_SIZE', 64 * 1024)
WEBSOCKET_HEARTBEAT_INTERVAL = env_int('WEBSOCKET_HEARTBEAT_INTERVAL', 30)
WEBSOCKET_CONNECTION_TIMEOUT = env_int('WEBSOCKET_CONNECTION_TIMEOUT', 3600)
WEBSOCKET_RATE_LIMIT = env_int('WEBSOCKET_RATE_LIMIT', 60)

MESSAGE_PAGE_SIZE = env_int('MESSAGE_PAGE_SIZE', 50)


# Internationalization

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# Logging

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
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
        name: {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False}
        for name in (
            'marketplace',
            'profiles',
            'products',
            'conversations',
            'negotiations',
            'notifications',
            'cart',
            'orders',
            'chatbot',
            'websocket_chat',
        )
    },
}
