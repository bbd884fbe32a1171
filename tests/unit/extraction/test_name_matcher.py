# tests/unit/extraction/test_name_matcher.py
import pytest
from pypdf.generic import ByteStringObject, TextStringObject

from zugferd_extract.schemas.attachment import DescriptorName, FileDescriptor, NameField
from zugferd_extract.services.extraction.name_matcher import NameMatcher


def descriptor(plain=None, unicode=None) -> FileDescriptor:
    names = []
    if plain is not None:
        names.append(DescriptorName(field=NameField.PLAIN, raw=plain))
    if unicode is not None:
        names.append(DescriptorName(field=NameField.UNICODE, raw=unicode))
    return FileDescriptor(names=names)


def test_default_names():
    """Ohne expliziten Namen werden factur-x.xml und xrechnung.xml akzeptiert."""
    matcher = NameMatcher.from_default()
    assert matcher.names == ["factur-x.xml", "xrechnung.xml"]
    assert matcher.matches(TextStringObject("factur-x.xml"))
    assert matcher.matches(TextStringObject("xrechnung.xml"))
    assert not matcher.matches(TextStringObject("zugferd-invoice.xml"))


def test_explicit_name_replaces_defaults():
    matcher = NameMatcher.from_name("custom.xml")
    assert matcher.matches("custom.xml")
    assert not matcher.matches("factur-x.xml")


def test_match_is_case_sensitive():
    """Factur-X.xml darf nicht auf factur-x.xml passen."""
    matcher = NameMatcher.from_name("factur-x.xml")
    assert not matcher.matches(TextStringObject("Factur-X.xml"))
    assert matcher.matching_name(descriptor(plain="Factur-X.xml")) is None


def test_empty_name_set_is_rejected():
    with pytest.raises(ValueError):
        NameMatcher([])
    with pytest.raises(ValueError):
        NameMatcher.from_name("")


def test_undecodable_name_is_no_match():
    """Nicht dekodierbare Byte-Strings gelten als kein Treffer, nicht als Fehler."""
    matcher = NameMatcher.from_default()
    assert not matcher.matches(ByteStringObject(b"\xff\xfe\xfa"))
    assert matcher.matching_name(descriptor(plain=ByteStringObject(b"\xff\xfe\xfa"), unicode="factur-x.xml")) == "factur-x.xml"


def test_matching_name_prefers_plain_field():
    matcher = NameMatcher(["a.xml", "b.xml"])
    assert matcher.matching_name(descriptor(plain="a.xml", unicode="b.xml")) == "a.xml"


def test_matching_name_falls_back_to_unicode_field():
    matcher = NameMatcher.from_name("rechnung-ä.xml")
    assert matcher.matching_name(descriptor(plain="rechnung-a.xml", unicode="rechnung-ä.xml")) == "rechnung-ä.xml"


def test_matching_suffix_ignores_candidate_set():
    assert NameMatcher.matching_suffix(descriptor(plain="report.xml"), ".xml") == "report.xml"
    assert NameMatcher.matching_suffix(descriptor(plain="invoice.pdf", unicode="data.xml"), ".xml") == "data.xml"
    assert NameMatcher.matching_suffix(descriptor(plain="REPORT.XML"), ".xml") is None
    assert NameMatcher.matching_suffix(descriptor(), ".xml") is None


def test_str_lists_candidates():
    assert str(NameMatcher.from_default()) == "'factur-x.xml' or 'xrechnung.xml'"
