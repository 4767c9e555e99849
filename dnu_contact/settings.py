import os
from pathlib import Path
from dotenv import load_dotenv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")  # <— tự động nạp .env

# Quick-start development settings - unsuitable for production
# See https://docs.djangoproject.com/en/5.2/howto/deployment/checklist/

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-secret-key")
DEBUG = os.getenv("DEBUG", "1") == "1"
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")
# Custom user model
AUTH_USER_MODEL = "accounts.User"

# Login settings - LOGIN_URL cần có namespace vì URL nằm trong app có app_name
LOGIN_URL = "accounts:login"
LOGIN_REDIRECT_URL = "home:index"
LOGOUT_REDIRECT_URL = "accounts:login"

# Application definition

INSTALLED_APPS = [
    # Django mặc định
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Thư viện bên thứ 3
    "django_filters",
    "widget_tweaks",
    "django_htmx",
    # Các app của hệ thống
    "apps.common.apps.CommonConfig",
    "apps.accounts.apps.AccountsConfig",
    "apps.units",
    "apps.staff",
    "apps.students",
    "apps.activity_logs",
]

# Thứ tự pipeline: bảo mật/HTTPS -> phiên -> định tuyến -> xác thực -> phân quyền (theo view)
MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "django_htmx.middleware.HtmxMiddleware",
]

ROOT_URLCONF = "dnu_contact.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
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

WSGI_APPLICATION = "dnu_contact.wsgi.application"
ASGI_APPLICATION = "dnu_contact.asgi.application"


# Database - SQLite, một file duy nhất
# https://docs.djangoproject.com/en/5.2/ref/settings/#databases

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.getenv("DNU_DATABASE_PATH", str(BASE_DIR / "dnucontact.db")),
    }
}


# Identity policy
# Mật khẩu: có chữ số, chữ thường, chữ hoa; không bắt buộc ký tự đặc biệt; tối thiểu 8 ký tự
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": 8},
    },
    {
        "NAME": "apps.accounts.validators.PasswordComplexityValidator",
        "OPTIONS": {
            "require_digit": True,
            "require_lowercase": True,
            "require_uppercase": True,
            "require_non_alphanumeric": False,
            "required_unique_chars": 1,
        },
    },
]

# Khóa tài khoản 5 phút sau 5 lần đăng nhập sai, áp dụng cho cả user mới
IDENTITY_LOCKOUT_MINUTES = 5
IDENTITY_MAX_FAILED_ATTEMPTS = 5
IDENTITY_LOCKOUT_ALLOWED_FOR_NEW_USERS = True

IDENTITY_ALLOWED_USERNAME_CHARACTERS = (
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789-._@+"
)

# Tạm thời tắt để test
IDENTITY_REQUIRE_CONFIRMED_EMAIL = False


# Startup: xóa và tạo lại database, sau đó seed dữ liệu mẫu
DNU_SEED_ON_STARTUP = os.getenv("DNU_SEED_ON_STARTUP", "1") == "1"
DNU_RESET_DATABASE_ON_STARTUP = os.getenv("DNU_RESET_DATABASE_ON_STARTUP", "1") == "1"
# Nhiều worker (gunicorn -w N) dùng chung file khóa này: chỉ một worker được reset/seed
DNU_STARTUP_LOCK_PATH = os.getenv("DNU_STARTUP_LOCK_PATH", DATABASES["default"]["NAME"] + ".startup.lock")

# Đăng ký service: tên -> class hiện thực
DNU_SERVICES = {
    "email": "apps.common.services.EmailService",
    "activity_log": "apps.activity_logs.services.ActivityLogService",
}


# Email
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend")
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", "no-reply@dnu.edu.vn")
SITE_NAME = "DNU Contact"
SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "info@dnu.edu.vn")


# Môi trường production: chuyển hướng HTTPS và bật HSTS
if not DEBUG:
    SECURE_SSL_REDIRECT = os.getenv("SECURE_SSL_REDIRECT", "1") == "1"
    SECURE_HSTS_SECONDS = int(os.getenv("SECURE_HSTS_SECONDS", "2592000"))
    SESSION_COOKIE_SECURE = True
    CSRF_COOKIE_SECURE = True


# Logging
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "{asctime} {levelname} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "apps": {
            "handlers": ["console"],
            "level": os.getenv("DJANGO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}


# Internationalization
# https://docs.djangoproject.com/en/5.2/topics/i18n/

LANGUAGE_CODE = "vi"

TIME_ZONE = "Asia/Ho_Chi_Minh"

USE_I18N = True

USE_TZ = True


# Static files (CSS, JS, Images)
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"  # thư mục collectstatic (deploy)

# Default primary key field type
# https://docs.djangoproject.com/en/5.2/ref/settings/#default-auto-field

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
