# No database is needed, the transactions are generated as text.
DATABASES = {}

INSTALLED_APPS = [
    "wfstbuilder",
]

# Test session requirements

SECRET_KEY = "insecure-tests-only"

TIME_ZONE = "Europe/Amsterdam"
USE_TZ = True

WFST_COORDINATE_ORDER = True
WFST_AXIS_ORDER_FROM_CRS = False
