"""The ``<wfs:Transaction>`` envelope.

This combines the actions into a single document, e.g.::

    <wfs:Transaction xmlns:app="..." xmlns:xsi="..." xmlns:gml="..." xmlns:wfs="..."
                     xsi:schemaLocation="http://www.opengis.net/wfs/2.0 ..."
                     service="WFS" version="2.0.0">
      <wfs:Insert>...</wfs:Insert>
      <wfs:Delete typeName="app:roadsType">...</wfs:Delete>
    </wfs:Transaction>
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

import orjson

from wfstbuilder import conf
from wfstbuilder.actions import delete, insert, update
from wfstbuilder.exceptions import InvalidActionsError
from wfstbuilder.namespaces import assign_namespaces, render_xmlns_attributes, xmlns
from wfstbuilder.options import TransactionOptions, as_options
from wfstbuilder.output.utils import render_tag

logger = logging.getLogger(__name__)

__all__ = (
    "transaction",
    "schema_locations",
)

WFS_20_XSD = "http://schemas.opengis.net/wfs/2.0/wfs.xsd"

RE_VERSION_20 = re.compile(r"2\.0\.\d+")

# The actions that can be given as {name: features}, in the order they are written.
ACTION_BUILDERS = {
    "insert": insert,
    "update": update,
    "delete": delete,
}


def schema_locations(overrides: Mapping[str, str] | None = None) -> str:
    """Build the ``xsi:schemaLocation`` value, as space separated ``uri location`` pairs.

    The WFS 2.0 schema is always included. The given mapping is not modified.
    """
    locations = dict(overrides or {})
    locations[xmlns.wfs20.value] = WFS_20_XSD
    return " ".join(f"{uri} {location}" for uri, location in locations.items())


def _get_version(version: str | None) -> str:
    if version and RE_VERSION_20.fullmatch(version):
        return version

    if version:
        logger.debug(
            "Version %r is not supported, writing %s instead", version, conf.WFST_DEFAULT_VERSION
        )
    return conf.WFST_DEFAULT_VERSION


def _describe(actions) -> str:
    try:
        return orjson.dumps(actions).decode()
    except TypeError:
        return repr(actions)


def _build_actions(actions, options: TransactionOptions) -> str:
    """Turn the given actions into the XML content of the transaction."""
    if isinstance(actions, str):
        return actions
    elif isinstance(actions, (list, tuple)) and all(isinstance(a, str) for a in actions):
        return "".join(actions)
    elif isinstance(actions, Mapping) and any(name in actions for name in ACTION_BUILDERS):
        return "".join(
            builder(actions[name], options)
            for name, builder in ACTION_BUILDERS.items()
            if actions.get(name) is not None
        )
    else:
        raise InvalidActionsError(
            "Expected a string, a list of strings, or a mapping with 'insert', 'update' "
            f"or 'delete' features, got: {_describe(actions)}"
        )


def transaction(actions, options: TransactionOptions | Mapping | None = None) -> str:
    """Wrap the actions in a ``<wfs:Transaction>``.

    :param actions: Either the action XML (a string or list of strings), or a mapping
        with ``insert``, ``update`` and/or ``delete`` features that are passed
        to the corresponding action function with the same options.
    :param options: The transaction options; the ``ns_assignments``, ``schema_locations``,
        ``version``, ``srs_name``, ``lock_id``, ``release_action`` and ``handle``
        affect the envelope.
    :raises InvalidActionsError: when the actions can't be interpreted.
    :raises UndeclaredNamespaceError: when the actions use a namespace prefix that has no URI.
    """
    options = as_options(options)
    content = _build_actions(actions, options)

    namespaces = assign_namespaces(options.ns_assignments, content)
    attrs = render_xmlns_attributes(namespaces)
    attrs["xsi:schemaLocation"] = schema_locations(options.schema_locations)
    attrs["service"] = "WFS"
    attrs["version"] = _get_version(options.version)
    attrs["srsName"] = options.srs_name
    attrs["lockId"] = options.lock_id
    attrs["releaseAction"] = options.release_action
    attrs["handle"] = options.handle
    return render_tag("wfs", "Transaction", attrs, content)
