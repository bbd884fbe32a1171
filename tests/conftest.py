# tests/conftest.py
import io
from typing import List, Optional, Sequence, Tuple

import pytest
from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    DecodedStreamObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
    TextStringObject,
)

from zugferd_extract.services.extraction.pdf_util import PypdfDocument

# ------------------------------------------------------------------------
# Mock XML Daten
# ------------------------------------------------------------------------

MINIMAL_CII_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<rsm:CrossIndustryInvoice xmlns:rsm="urn:un:unece:uncefact:data:standard:CrossIndustryInvoice:100"
                          xmlns:ram="urn:un:unece:uncefact:data:standard:ReusableAggregateBusinessInformationEntity:100">
    <rsm:ExchangedDocument>
        <ram:ID>R-TEST-2025-001</ram:ID>
        <ram:TypeCode>380</ram:TypeCode>
    </rsm:ExchangedDocument>
</rsm:CrossIndustryInvoice>
"""

OTHER_XML = b"<?xml version=\"1.0\"?><report><line>not an invoice</line></report>"

FACTURX_XMP_ELEMENT = """<?xpacket begin="﻿" id="W5M0MpCehiHzreSzNTczkc9d"?>
<x:xmpmeta xmlns:x="adobe:ns:meta/">
  <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
    <rdf:Description rdf:about="" xmlns:pdfaid="http://www.aiim.org/pdfa/ns/id/">
      <pdfaid:part>3</pdfaid:part>
      <pdfaid:conformance>B</pdfaid:conformance>
    </rdf:Description>
    <rdf:Description rdf:about="" xmlns:fx="urn:factur-x:pdfa:CrossIndustryDocument:invoice:1p0#">
      <fx:DocumentType>INVOICE</fx:DocumentType>
      <fx:DocumentFileName>{name}</fx:DocumentFileName>
      <fx:Version>1.0</fx:Version>
      <fx:ConformanceLevel>EN 16931</fx:ConformanceLevel>
    </rdf:Description>
  </rdf:RDF>
</x:xmpmeta>
<?xpacket end="w"?>"""

FACTURX_XMP_ATTRIBUTE = """<?xpacket begin="﻿" id="W5M0MpCehiHzreSzNTczkc9d"?>
<x:xmpmeta xmlns:x="adobe:ns:meta/">
  <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
    <rdf:Description rdf:about=""
        xmlns:fx="urn:factur-x:pdfa:CrossIndustryDocument:invoice:1p0#"
        fx:DocumentType="INVOICE"
        fx:DocumentFileName="{name}"
        fx:Version="1.0"
        fx:ConformanceLevel="BASIC"/>
  </rdf:RDF>
</x:xmpmeta>
<?xpacket end="w"?>"""

PLAIN_XMP = """<x:xmpmeta xmlns:x="adobe:ns:meta/">
  <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
    <rdf:Description rdf:about="" xmlns:dc="http://purl.org/dc/elements/1.1/">
      <dc:format>application/pdf</dc:format>
    </rdf:Description>
  </rdf:RDF>
</x:xmpmeta>"""


# ------------------------------------------------------------------------
# Mock PDF Generierung (pypdf)
# ------------------------------------------------------------------------

class PdfBuilder:
    """
    Baut Test-PDFs mit frei kombinierbaren /AF, /EmbeddedFiles und /Metadata Einträgen.
    """

    def __init__(self):
        self.writer = PdfWriter()
        # Ein PDF benötigt mindestens eine Seite
        self.writer.add_blank_page(width=595, height=842)  # A4 Größe

    @property
    def root(self) -> DictionaryObject:
        return self.writer.root_object

    def add_object(self, obj) -> IndirectObject:
        return self.writer._add_object(obj)

    def add_stream(self, data: bytes, filter_name: Optional[str] = None) -> IndirectObject:
        stream = DecodedStreamObject()
        stream.set_data(data)
        stream[NameObject("/Type")] = NameObject("/EmbeddedFile")
        if filter_name:
            stream[NameObject("/Filter")] = NameObject(filter_name)
        return self.add_object(stream)

    def filespec(
        self,
        name: Optional[str] = None,
        data: bytes = MINIMAL_CII_XML,
        unicode_name: Optional[str] = None,
        ef_fields: Sequence[str] = ("/F",),
        embedded: bool = True,
        target: Optional[IndirectObject] = None,
    ) -> IndirectObject:
        """Filespec mit /F bzw. /UF Name und /EF Verweis(en) auf einen Stream."""
        spec = DictionaryObject({NameObject("/Type"): NameObject("/Filespec")})
        if name is not None:
            spec[NameObject("/F")] = TextStringObject(name)
        if unicode_name is not None:
            spec[NameObject("/UF")] = TextStringObject(unicode_name)
        if embedded:
            stream_ref = target if target is not None else self.add_stream(data)
            spec[NameObject("/EF")] = DictionaryObject(
                {NameObject(field): stream_ref for field in ef_fields}
            )
        return self.add_object(spec)

    def dangling_reference(self) -> IndirectObject:
        """Referenz auf ein null-Objekt (kein Stream)."""
        return self.add_object(NullObject())

    def set_associated_files(self, *specs: IndirectObject) -> "PdfBuilder":
        self.root[NameObject("/AF")] = ArrayObject(specs)
        return self

    def leaf(self, pairs: List[Tuple[str, IndirectObject]]) -> DictionaryObject:
        names = ArrayObject()
        for key, spec in pairs:
            names.append(TextStringObject(key))
            names.append(spec)
        return DictionaryObject({NameObject("/Names"): names})

    def interior(self, *kids: DictionaryObject) -> DictionaryObject:
        return DictionaryObject({NameObject("/Kids"): ArrayObject(self.add_object(kid) for kid in kids)})

    def set_embedded_files(self, node: DictionaryObject) -> "PdfBuilder":
        self.root[NameObject("/Names")] = DictionaryObject(
            {NameObject("/EmbeddedFiles"): self.add_object(node)}
        )
        return self

    def set_metadata(self, xmp) -> "PdfBuilder":
        data = xmp.encode("utf-8") if isinstance(xmp, str) else xmp
        stream = DecodedStreamObject()
        stream.set_data(data)
        stream[NameObject("/Type")] = NameObject("/Metadata")
        stream[NameObject("/Subtype")] = NameObject("/XML")
        self.root[NameObject("/Metadata")] = self.add_object(stream)
        return self

    def build(self) -> bytes:
        buffer = io.BytesIO()
        self.writer.write(buffer)
        return buffer.getvalue()

    def document(self) -> PypdfDocument:
        return PypdfDocument.from_bytes(self.build(), source="test.pdf")


def create_dummy_pdf() -> bytes:
    """Erstellt ein einfaches, valides PDF ohne Anhang."""
    return PdfBuilder().build()


def create_mock_zugferd_pdf(xml_content: bytes, filename: str = "factur-x.xml") -> bytes:
    """
    Erstellt ein Mock ZUGFeRD/Factur-X PDF mit /Metadata, /AF und /EmbeddedFiles.
    """
    builder = PdfBuilder()
    spec = builder.filespec(filename, xml_content, unicode_name=filename, ef_fields=("/F", "/UF"))
    builder.set_associated_files(spec)
    builder.set_embedded_files(builder.leaf([(filename, spec)]))
    builder.set_metadata(FACTURX_XMP_ELEMENT.format(name=filename))
    return builder.build()


@pytest.fixture
def pdf_builder():
    return PdfBuilder()


@pytest.fixture
def minimal_cii_bytes():
    return MINIMAL_CII_XML


@pytest.fixture
def dummy_pdf_bytes():
    return create_dummy_pdf()


@pytest.fixture
def valid_zugferd_bytes(minimal_cii_bytes):
    return create_mock_zugferd_pdf(minimal_cii_bytes, "factur-x.xml")


@pytest.fixture
def valid_zugferd_file(tmp_path, valid_zugferd_bytes):
    path = tmp_path / "rechnung.pdf"
    path.write_bytes(valid_zugferd_bytes)
    return path
