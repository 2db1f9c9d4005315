"""Document metadata: read, edit, or strip.

Edits write both the information dictionary and a matching XMP packet so
readers that prefer either one see the same values. A deep clean removes
both.
"""

import logging

from lxml import etree

from paperknife.documents.source import SourceDocument
from paperknife.reconstruction.client import CancellationToken
from schemas.metadata import DocumentMetadata
from schemas.output import ToolOutput

from .transformer import SAVE_OPTIONS, DocumentTransformer, ProgressCallback

logger = logging.getLogger(__name__)

X_NS = "adobe:ns:meta/"
RDF_NS = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
DC_NS = "http://purl.org/dc/elements/1.1/"
PDF_NS = "http://ns.adobe.com/pdf/1.3/"
XMP_NS = "http://ns.adobe.com/xap/1.0/"
XML_NS = "http://www.w3.org/XML/1998/namespace"

XPACKET_BEGIN = '<?xpacket begin="\ufeff" id="W5M0MpCehiHzreSzNTczkc9d"?>'
XPACKET_END = '<?xpacket end="w"?>'


def read_metadata(source: SourceDocument) -> DocumentMetadata:
    doc = source.open_copy()
    try:
        return DocumentMetadata.from_pdf_info(doc.metadata)
    finally:
        doc.close()


def _rdf_list(parent: etree._Element, container: str, values: list[str], lang: bool = False) -> None:
    holder = etree.SubElement(parent, f"{{{RDF_NS}}}{container}")
    for value in values:
        item = etree.SubElement(holder, f"{{{RDF_NS}}}li")
        if lang:
            item.set(f"{{{XML_NS}}}lang", "x-default")
        item.text = value


def build_xmp_packet(metadata: DocumentMetadata) -> str:
    """Serialize metadata as an XMP packet (Dublin Core, PDF and XMP basic schemas)."""
    nsmap = {"x": X_NS, "rdf": RDF_NS, "dc": DC_NS, "pdf": PDF_NS, "xmp": XMP_NS}
    root = etree.Element(f"{{{X_NS}}}xmpmeta", nsmap=nsmap)
    rdf = etree.SubElement(root, f"{{{RDF_NS}}}RDF")
    description = etree.SubElement(rdf, f"{{{RDF_NS}}}Description")
    description.set(f"{{{RDF_NS}}}about", "")

    if metadata.title:
        title = etree.SubElement(description, f"{{{DC_NS}}}title")
        _rdf_list(title, "Alt", [metadata.title], lang=True)
    if metadata.author:
        creator = etree.SubElement(description, f"{{{DC_NS}}}creator")
        _rdf_list(creator, "Seq", [metadata.author])
    if metadata.subject:
        subject = etree.SubElement(description, f"{{{DC_NS}}}description")
        _rdf_list(subject, "Alt", [metadata.subject], lang=True)
    if metadata.keyword_list:
        keywords = etree.SubElement(description, f"{{{DC_NS}}}subject")
        _rdf_list(keywords, "Bag", metadata.keyword_list)
        etree.SubElement(description, f"{{{PDF_NS}}}Keywords").text = metadata.keywords
    if metadata.producer:
        etree.SubElement(description, f"{{{PDF_NS}}}Producer").text = metadata.producer
    if metadata.creator:
        etree.SubElement(description, f"{{{XMP_NS}}}CreatorTool").text = metadata.creator

    body = etree.tostring(root, encoding="unicode", pretty_print=True)
    return f"{XPACKET_BEGIN}\n{body}{XPACKET_END}"


class MetadataTransformer(DocumentTransformer):
    """Replace a document's metadata, or remove all of it.

    Attributes:
        metadata: New values (ignored for a deep clean)
        deep_clean: Strip the information dictionary and XMP packet
    """

    suffix = "metadata"

    def __init__(self, metadata: DocumentMetadata | None = None, deep_clean: bool = False):
        self.metadata = metadata or DocumentMetadata()
        self.deep_clean = deep_clean

    def transform(
        self,
        source: SourceDocument,
        on_progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> ToolOutput:
        doc = source.open_copy()
        try:
            if self.deep_clean:
                doc.set_metadata({})
                doc.del_xml_metadata()
                logger.info(f"Stripped metadata from {source.name}")
            else:
                doc.set_metadata(self.metadata.model_dump())
                doc.set_xml_metadata(build_xmp_packet(self.metadata))
                logger.info(f"Updated metadata of {source.name}")
            data = doc.tobytes(**SAVE_OPTIONS)
        finally:
            doc.close()

        if on_progress:
            on_progress(100)
        suffix = "cleaned" if self.deep_clean else self.suffix
        return ToolOutput.document(source.output_name(suffix), data)
