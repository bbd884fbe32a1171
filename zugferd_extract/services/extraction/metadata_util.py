import logging
import re
from xml.sax.saxutils import unescape

from ...core.errors import ErrorKind, ExtractionError

logger = logging.getLogger(__name__)

# Namespace der Factur-X/ZUGFeRD 2.x Erweiterung im XMP
NS_FACTURX = "urn:factur-x:pdfa:CrossIndustryDocument:invoice"

# <rdf:Description> mit fx-Namespace, entweder selbstschließend mit Attributen
# oder als offenes Element mit Unterelementen bis zum schließenden Tag
DESCRIPTION_PATTERN = re.compile(
    r'<rdf:Description\s[^>]*?xmlns:fx="' + re.escape(NS_FACTURX) + r'[^>]*?(?:/>|>.*?</rdf:Description>)',
    re.DOTALL | re.MULTILINE,
)

FILENAME_ELEMENT_PATTERN = re.compile(r"<fx:DocumentFileName>(.*?)</fx:DocumentFileName>", re.DOTALL)
FILENAME_ATTRIBUTE_PATTERN = re.compile(r'fx:DocumentFileName="(.*?)"', re.DOTALL)


def find_facturx_description(metadata: str) -> str:
    """Sucht den <rdf:Description> Block, der den Factur-X Namespace deklariert."""
    match = DESCRIPTION_PATTERN.search(metadata)
    if match is None:
        raise ExtractionError(
            ErrorKind.METADATA_DESCRIPTION_MISSING,
            "Missing <rdf:Description> element in /Metadata stream",
        )
    return match.group(0)


def extract_name_from_metadata(metadata: str) -> str:
    """
    Ermittelt den Anhangsnamen aus fx:DocumentFileName im XMP.
    Die Element-Form wird der Attribut-Form vorgezogen; leere Werte zählen nicht.
    """
    description = find_facturx_description(metadata)

    for pattern in (FILENAME_ELEMENT_PATTERN, FILENAME_ATTRIBUTE_PATTERN):
        for match in pattern.finditer(description):
            name = unescape(match.group(1), {"&quot;": '"', "&apos;": "'"}).strip()
            if name:
                logger.debug(f"/Metadata enthält den Anhangsnamen '{name}'")
                return name

    raise ExtractionError(
        ErrorKind.METADATA_FILENAME_MISSING,
        "Failed to locate fx:DocumentFileName in /Metadata stream",
    )
