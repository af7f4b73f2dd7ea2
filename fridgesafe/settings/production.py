from .base import *

# -----------------------------------------
# Production Settings
# -----------------------------------------
DEBUG = False

# Always pull ALLOWED_HOSTS from your .env
ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='fridgesafe.app', cast=lambda v: [s.strip() for s in v.split(',')])

SECURE_HSTS_SECONDS = 31536000
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_SSL_REDIRECT = config('SECURE_SSL_REDIRECT', default=True, cast=bool)
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage'},
}
