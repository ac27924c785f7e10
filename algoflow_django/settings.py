# algoflow_django/settings.py
from pathlib import Path
from decouple import config, Csv

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = config("DJANGO_SECRET_KEY", default="django-insecure-local-only")
DJANGO_ENV = config("DJANGO_ENV", default="local")

if DJANGO_ENV == "local":
    DEBUG = config("DEBUG", default=True, cast=bool)
    ALLOWED_HOSTS = ["127.0.0.1", "localhost", "testserver"]
    CORS_ALLOW_ALL_ORIGINS = True
else:
    DEBUG = False
    ALLOWED_HOSTS = config("ALLOWED_HOSTS", cast=Csv())
    CORS_ALLOWED_ORIGINS = config("CORS_ALLOWED_ORIGINS", cast=Csv())

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "django.contrib.staticfiles",
    "rest_framework",
    "corsheaders",
    "flowchart",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "algoflow_django.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
            ],
        },
    },
]

WSGI_APPLICATION = "algoflow_django.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

LANGUAGE_CODE = "en-us"

TIME_ZONE = "UTC"

USE_I18N = True

USE_TZ = True

STATIC_URL = "static/"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    # публичный API без логина, как у исходного фронта
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "UNAUTHENTICATED_USER": None,
}

CORS_ALLOW_HEADERS = [
    "content-type",
    "authorization",
    "x-requested-with",
    "Cache-Control",
]

# Генеративная модель (Gemini). Без ключа клиент не работает и отдаётся запасная диаграмма.
GEMINI_API_KEY = config("GEMINI_API_KEY", default="")
GEMINI_API_URL = config("GEMINI_API_URL", default="https://generativelanguage.googleapis.com/v1beta")
GEMINI_MODEL = config("GEMINI_MODEL", default="gemini-2.5-flash")
GEMINI_TIMEOUT = config("GEMINI_TIMEOUT", default=30, cast=int)
GEMINI_TEMPERATURE = config("GEMINI_TEMPERATURE", default=0.4, cast=float)

# словарь классификатора; пусто → встроенный список из prompt_presets
FLOWCHART_ALGORITHM_KEYWORDS = config("FLOWCHART_ALGORITHM_KEYWORDS", default="", cast=Csv()) or None


LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {process:d} {thread:d} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {asctime} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "level": "DEBUG",
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "loggers": {
        "django": {"handlers": ["console"], "level": "INFO",},
        "django.request": {"handlers": ["console"], "level": "WARNING"},
        "flowchart": {
            "handlers": ["console"],
            "level": config("FLOWCHART_LOG_LEVEL", default="INFO"),
        },
    },
}
