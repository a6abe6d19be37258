"""Django settings for the takas project."""

import os
import tempfile
from datetime import timedelta
from pathlib import Path

from box import Box
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")


def _env_bool(name: str, default: bool = False) -> bool:  # noqa: FBT001, FBT002
	return os.environ.get(name, str(default)).strip().lower() in {"1", "true", "yes", "on"}


ENV = Box(
	{
		"SECRET_KEY": os.environ.get("SECRET_KEY", "insecure-development-key-change-me"),
		"DEBUG": _env_bool("DEBUG", default=True),
		"ALLOWED_HOSTS": [host for host in os.environ.get("ALLOWED_HOSTS", "*").split(",") if host],
		"DATABASE_ENGINE": os.environ.get("DATABASE_ENGINE", "django.db.backends.sqlite3"),
		"DATABASE_NAME": os.environ.get("DATABASE_NAME", str(BASE_DIR / "db.sqlite3")),
		"DATABASE_USER": os.environ.get("DATABASE_USER", ""),
		"DATABASE_PASSWORD": os.environ.get("DATABASE_PASSWORD", ""),
		"DATABASE_HOST": os.environ.get("DATABASE_HOST", ""),
		"DATABASE_PORT": os.environ.get("DATABASE_PORT", ""),
		"SEND_SMS_MESSAGES": _env_bool("SEND_SMS_MESSAGES"),
		"CLICKSEND_USERNAME": os.environ.get("CLICKSEND_USERNAME", ""),
		"CLICKSEND_API_KEY": os.environ.get("CLICKSEND_API_KEY", ""),
		"LOG_LEVEL": os.environ.get("LOG_LEVEL", "INFO"),
		"RUN_EXPIRY_SCHEDULER": _env_bool("RUN_EXPIRY_SCHEDULER", default=True),
	},
	frozen_box=True,
)

TRADE_SETTINGS = Box(
	{
		"OFFER_TTL_DAYS": 7,
		"MAX_CHAIN_DEPTH": 50,
		"SMART_MATCH_LIMIT": 20,
		"MAX_MESSAGE_LENGTH": 500,
		"MAX_NOTES_LENGTH": 1000,
		"CASCADE_REJECT_REASON": "Product committed to another trade",
		"EXPIRED_REASON": "Offer expired",
		"EXPIRY_SWEEP_INTERVAL_SECONDS": 3600,
	},
	frozen_box=True,
)

SECRET_KEY = ENV.SECRET_KEY
DEBUG = ENV.DEBUG
ALLOWED_HOSTS = ENV.ALLOWED_HOSTS

INSTALLED_APPS = [
	"django.contrib.admin",
	"django.contrib.auth",
	"django.contrib.contenttypes",
	"django.contrib.sessions",
	"django.contrib.messages",
	"django.contrib.staticfiles",
	"rest_framework",
	"django_filters",
	"core",
	"trade",
]

MIDDLEWARE = [
	"django.middleware.security.SecurityMiddleware",
	"django.contrib.sessions.middleware.SessionMiddleware",
	"django.middleware.common.CommonMiddleware",
	"django.middleware.csrf.CsrfViewMiddleware",
	"django.contrib.auth.middleware.AuthenticationMiddleware",
	"django.contrib.messages.middleware.MessageMiddleware",
	"django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "takas.urls"

TEMPLATES = [
	{
		"BACKEND": "django.template.backends.django.DjangoTemplates",
		"DIRS": [],
		"APP_DIRS": True,
		"OPTIONS": {
			"context_processors": [
				"django.template.context_processors.request",
				"django.contrib.auth.context_processors.auth",
				"django.contrib.messages.context_processors.messages",
			],
		},
	},
]

WSGI_APPLICATION = "takas.wsgi.application"

# SQLite serializes writers through IMMEDIATE transactions so concurrent claims queue on the lock
if ENV.DATABASE_ENGINE == "django.db.backends.sqlite3":
	DATABASES = {
		"default": {
			"ENGINE": ENV.DATABASE_ENGINE,
			"NAME": ENV.DATABASE_NAME,
			"OPTIONS": {"transaction_mode": "IMMEDIATE", "timeout": 20},
			# One file per test process; pytest-django adds the xdist worker suffix on top
			"TEST": {"NAME": str(Path(tempfile.gettempdir()) / f"takas_test_{os.getpid()}.sqlite3")},
		},
	}
else:
	DATABASES = {
		"default": {
			"ENGINE": ENV.DATABASE_ENGINE,
			"NAME": ENV.DATABASE_NAME,
			"USER": ENV.DATABASE_USER,
			"PASSWORD": ENV.DATABASE_PASSWORD,
			"HOST": ENV.DATABASE_HOST,
			"PORT": ENV.DATABASE_PORT,
		},
	}

AUTH_USER_MODEL = "core.User"

AUTH_PASSWORD_VALIDATORS = [
	{"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
	{"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
	{"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
	{"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
	"DEFAULT_AUTHENTICATION_CLASSES": ("rest_framework_simplejwt.authentication.JWTAuthentication",),
	"DEFAULT_PERMISSION_CLASSES": ("rest_framework.permissions.IsAuthenticated",),
	"DEFAULT_FILTER_BACKENDS": (
		"django_filters.rest_framework.DjangoFilterBackend",
		"rest_framework.filters.SearchFilter",
		"rest_framework.filters.OrderingFilter",
	),
	"DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
	"PAGE_SIZE": 50,
	"EXCEPTION_HANDLER": "takas.common.exception_handler.trade_exception_handler",
}

SIMPLE_JWT = {
	"ACCESS_TOKEN_LIFETIME": timedelta(hours=1),
	"REFRESH_TOKEN_LIFETIME": timedelta(days=7),
}

LOGGING = {
	"version": 1,
	"disable_existing_loggers": False,
	"formatters": {
		"verbose": {"format": "{asctime} {levelname} {name}: {message}", "style": "{"},
	},
	"handlers": {
		"console": {"class": "logging.StreamHandler", "formatter": "verbose"},
	},
	"root": {"handlers": ["console"], "level": ENV.LOG_LEVEL},
	"loggers": {
		"django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
	},
}
