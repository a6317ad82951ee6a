from django.conf import settings
from django.core.signals import setting_changed
from django.dispatch import receiver

_originals = {}

# -- coordinate rendering

# GeoJSON coordinates are in longitude/easting, latitude/northing [,elevation] order
# (RFC 7946 section 3.1.1). Set this to False when the server expects northing/easting.
# This is the process-wide default; each call may still pass its own "coordinate_order".
WFST_COORDINATE_ORDER = getattr(settings, "WFST_COORDINATE_ORDER", True)

# Whether the axis ordering of the srsName decides the coordinate order,
# when no explicit coordinate order is given (e.g. urn:ogc:def:crs:EPSG::4326 is lat/lon).
WFST_AXIS_ORDER_FROM_CRS = getattr(settings, "WFST_AXIS_ORDER_FROM_CRS", False)

# Following https://docs.geoserver.org/stable/en/user/services/wfs/axis_order.html here:
# Whether the older EPSG:4326 notation should be treated as legacy longitude/latitude (x/y).
WFST_FORCE_XY_EPSG_4326 = getattr(settings, "WFST_FORCE_XY_EPSG_4326", True)

# Whether the legacy CRS notation http://www.opengis.net/gml/srs/epsg.xml# is X/Y
WFST_FORCE_XY_OLD_CRS = getattr(settings, "WFST_FORCE_XY_OLD_CRS", True)

# -- transaction envelope

# The version to write when the caller provides no (or an unsupported) 2.0.x version.
WFST_DEFAULT_VERSION = getattr(settings, "WFST_DEFAULT_VERSION", "2.0.0")


@receiver(setting_changed)
def _on_settings_change(setting, value, enter, **kwargs):
    if not setting.startswith("WFST_"):
        return

    conf_module = globals()
    if value is None and not enter:
        # override_settings().disable() returns what the django settings module had.
        # Revert to our defaults here instead.
        value = _originals.get(setting)
    else:
        # Track defaults of this file for reverting to them
        _originals.setdefault(setting, conf_module[setting])

    conf_module[setting] = value
