"""
Django settings for the Peduli backend.

Single settings module; environment differences are handled by the DJANGO_ENV
profile shim at the bottom.
"""

import os
from pathlib import Path
from celery.schedules import crontab

LOG_JSON = os.getenv("LOG_JSON", "1") == "1"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# this file lives at backend/peduli/settings.py; BASE_DIR points to /backend
BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-unsafe")
DEBUG = os.getenv("DJANGO_DEBUG", "0") == "1"
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]
CSRF_TRUSTED_ORIGINS = [o.strip() for o in os.getenv("CSRF_TRUSTED_ORIGINS", "").split(",") if o.strip()]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # project apps
    "accounts",
    "audit",
    "approvals",
    "programs.apps.ProgramsConfig",    # registers PROGRAM_PUBLISH callbacks
    "articles.apps.ArticlesConfig",    # registers ARTICLE_PUBLISH callbacks
    "pengusul.apps.PengusulConfig",    # registers ROLE_UPGRADE callbacks
    "donations.apps.DonationsConfig",  # ledger signals
    "finance",
    "ops",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "ops.middleware.RequestLogMiddleware",
]

# Templates (needed for Django admin)
TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",   # admin needs this
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    }
]

ROOT_URLCONF = "peduli.urls"
WSGI_APPLICATION = "peduli.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.mysql",
        "NAME": os.getenv("MYSQL_DATABASE", "peduli"),
        "USER": os.getenv("MYSQL_USER", "peduli"),
        "PASSWORD": os.getenv("MYSQL_PASSWORD", "peduli"),
        "HOST": os.getenv("DB_HOST", "127.0.0.1"),
        "PORT": int(os.getenv("DB_PORT", "3306")),
        "OPTIONS": {
            "charset": "utf8mb4",
            "use_unicode": True,
            # row locks on approvals rely on at least read-committed
            "isolation_level": "read committed",
        },
    }
}

AUTH_USER_MODEL = "accounts.User"
AUTHENTICATION_BACKENDS = ["django.contrib.auth.backends.ModelBackend"]

LANGUAGE_CODE = "id"
TIME_ZONE = os.getenv("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

ADMIN_URL = os.getenv("ADMIN_URL", "admin")

# --- Approvals ---
# Number of distinct APPROVE votes needed before an approval is finalized.
APPROVAL_REQUIRED_APPROVERS = {
    "PROGRAM_PUBLISH": int(os.getenv("APPROVERS_PROGRAM_PUBLISH", "1")),
    "ARTICLE_PUBLISH": int(os.getenv("APPROVERS_ARTICLE_PUBLISH", "1")),
    "ROLE_UPGRADE": int(os.getenv("APPROVERS_ROLE_UPGRADE", "1")),
}
# Decisions on these action types need a freshly re-entered password.
APPROVAL_SENSITIVE_ACTIONS = ["PROGRAM_PUBLISH", "ARTICLE_PUBLISH", "ROLE_UPGRADE"]

# --- Leaderboard ---
# None -> finance.tiers.TIER_TABLE
LEADERBOARD_TIERS = None

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/1")
CELERY_TIMEZONE = TIME_ZONE

CELERY_BEAT_SCHEDULE = {
    "donations-reconcile-funds-nightly": {
        "task": "donations.tasks.reconcile_program_funds",
        "schedule": crontab(hour=1, minute=30),
    },
    "ops-beat-heartbeat-every-1m": {
        "task": "ops.tasks.beat_heartbeat",
        "schedule": crontab(minute="*/1"),
    },
}

LOG_FMT = "%(asctime)s %(levelname)s %(name)s %(message)s %(process)d %(module)s"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "fmt": LOG_FMT,
        },
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if LOG_JSON else "plain",
        },
    },
    "root": {"handlers": ["console"], "level": LOG_LEVEL},
    "loggers": {
        "request": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "django.db.backends": {"level": "WARNING"},
    },
}

# ------------------------------------------------------------------------------
# Environment profile
# ------------------------------------------------------------------------------
# Prefer DJANGO_ENV; if not set, fall back to the suffix of DJANGO_SETTINGS_MODULE.
DJANGO_ENV = os.getenv("DJANGO_ENV")
if not DJANGO_ENV:
    _dsm = os.getenv("DJANGO_SETTINGS_MODULE", "")
    if _dsm.endswith(".staging"):
        DJANGO_ENV = "staging"
    elif _dsm.endswith(".production"):
        DJANGO_ENV = "production"
    else:
        DJANGO_ENV = "local"

DJANGO_ENV = DJANGO_ENV.lower()

if DJANGO_ENV == "local":
    DEBUG = True
elif DJANGO_ENV in {"staging", "production"}:
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True
    SECURE_SSL_REDIRECT = True
    SECURE_HSTS_SECONDS = 3600
    SECURE_HSTS_INCLUDE_SUBDOMAINS = True
    SECURE_HSTS_PRELOAD = True
