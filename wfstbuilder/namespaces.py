"""XML namespace handling for the generated transactions.

The generated XML uses short prefixes (e.g. ``<gml:Point>``, ``<app:road>``).
Each prefix needs a ``xmlns:prefix="uri"`` declaration at the ``<wfs:Transaction>``,
so the prefixes used in the generated actions are collected and checked here.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from enum import Enum

from wfstbuilder.exceptions import UndeclaredNamespaceError

logger = logging.getLogger(__name__)

__all__ = (
    "xmlns",
    "assign_namespaces",
    "find_prefixes",
    "render_xmlns_attributes",
)

# Finds the prefix in "<prefix:tag" and typeName="prefix:name".
# Closing tags don't need to be matched, they repeat the same prefix.
RE_NS_PREFIX = re.compile(r'(<|typeName=")(\w+):')


class xmlns(Enum):
    """Common namespaces within WFS land.
    Note these short aliases are arbitrary in XML syntax; the XML code may use any alias.
    The generated XML uses the member names as prefix.
    """

    # XML standard
    xsi = "http://www.w3.org/2001/XMLSchema-instance"

    # APIs by the Open Geospatial Consortium (OGC)
    wfs20 = "http://www.opengis.net/wfs/2.0"  # Web Feature Service (WFS)
    fes20 = "http://www.opengis.net/fes/2.0"  # Filter Encoding Standard (FES)
    gml32 = "http://www.opengis.net/gml/3.2"

    # Internal aliases
    wfs = wfs20
    fes = fes20
    gml = gml32

    @classmethod
    def as_ns_aliases(cls) -> dict[str, str]:
        """Map the namespaces as {alias: uri}"""
        return {prefix: member.value for prefix, member in cls.__members__.items()}

    def __str__(self):
        # Python 3.11+ has StrEnum for this.
        return self.value


def find_prefixes(xml: str) -> set[str]:
    """Collect the namespace prefixes that the XML text uses."""
    return {match.group(2) for match in RE_NS_PREFIX.finditer(xml)}


def assign_namespaces(ns_assignments: Mapping[str, str] | None, xml: str) -> dict[str, str]:
    """Build the ``{prefix: uri}`` declarations for a transaction.

    This starts with the caller-declared namespaces. The ``fes`` namespace is added
    when a filter is used, and ``xsi``, ``gml`` and ``wfs`` are always added.

    :param ns_assignments: The namespaces the caller declared, e.g. ``{"app": "http://..."}``.
    :param xml: The generated XML, which is scanned for the prefixes it uses.
    :raises UndeclaredNamespaceError: when a used prefix has no URI.
    """
    namespaces = dict(ns_assignments or {})
    used_prefixes = find_prefixes(xml)
    aliases = xmlns.as_ns_aliases()

    if "fes" in used_prefixes:
        namespaces["fes"] = aliases["fes"]

    for prefix in ("xsi", "gml", "wfs"):
        namespaces[prefix] = aliases[prefix]

    for prefix in sorted(used_prefixes):
        if not namespaces.get(prefix):
            logger.debug("Namespace '%s' is used, but only %r are declared", prefix, namespaces)
            raise UndeclaredNamespaceError(prefix)

    return namespaces


def render_xmlns_attributes(namespaces: Mapping[str, str]) -> dict[str, str]:
    """Convert the ``{prefix: uri}`` mapping into ``xmlns:prefix`` attributes."""
    return {
        (f"xmlns:{prefix}" if prefix else "xmlns"): uri for prefix, uri in namespaces.items()
    }
