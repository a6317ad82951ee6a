from __future__ import annotations

import logging
from doctest import Example

from lxml import etree
from lxml.doctestcompare import PARSE_XML, LXMLOutputChecker

from wfstbuilder.namespaces import xmlns

logger = logging.getLogger(__name__)

APP_NS = "http://example.org/app"

# Namespaces for tag retrieval
NAMESPACES = {
    # Namespaces
    "app": APP_NS,
    "tiger": "http://www.census.gov",
    "fes": xmlns.fes20.value,
    "gml": xmlns.gml32.value,
    "wfs": xmlns.wfs20.value,
    "xsi": xmlns.xsi.value,
}

XML_NS = " ".join(f'xmlns:{prefix}="{uri}"' for prefix, uri in NAMESPACES.items())


def parse_fragment(xml_text: str) -> etree._Element:
    """Parse a generated XML fragment, which uses the namespace prefixes without declaring them.
    This also proves that the fragment is well-formed.
    """
    try:
        root = etree.fromstring(f"<root {XML_NS}>{xml_text}</root>".encode())
    except etree.XMLSyntaxError as err:
        raise AssertionError(f"XML syntax error: {err} (source: {xml_text})") from err

    children = list(root)
    assert len(children) == 1, f"Expected a single element, got {len(children)}: {xml_text}"
    return children[0]


def parse_document(xml_text: str) -> etree._Element:
    """Parse a complete XML document, which declares its own namespaces."""
    try:
        return etree.fromstring(xml_text.encode())
    except etree.XMLSyntaxError as err:
        logger.debug("Failed XML parsing for:\n%s", xml_text)
        raise AssertionError(f"XML syntax error: {err} (source: {xml_text})") from err


def assert_xml_equal(got: str, want: str):
    """Compare two XML fragments, ignoring whitespace between the tags."""
    checker = LXMLOutputChecker()
    got = f"<root {XML_NS}>{got}</root>"
    want = f"<root {XML_NS}>{want}</root>"

    if not checker.check_output(want, got, PARSE_XML):
        example = Example("", "")
        example.want = want  # unencoded, avoid doctest for bytes type.
        message = checker.output_difference(example, got, PARSE_XML)
        raise AssertionError(message)
