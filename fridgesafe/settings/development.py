from .base import *

# -----------------------------------------
# Development Settings
# -----------------------------------------
DEBUG = True

ALLOWED_HOSTS = ['localhost', '127.0.0.1']

# Notifications stay on screen for a few seconds while developing
NOTIFICATION_REMOVE_DELAY = 5.0

for _app_logger in ('core', 'accounts', 'fridges', 'checklists', 'audits'):
    LOGGING['loggers'][_app_logger]['level'] = 'DEBUG'
LOGGING['handlers']['console']['class'] = 'logging.StreamHandler'
LOGGING['root']['level'] = 'DEBUG'
