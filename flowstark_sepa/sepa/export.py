"""Hand the rendered document over as a named file"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from flowstark_sepa.config import settings
from flowstark_sepa.utils.formatting import format_date

XML_CONTENT_TYPE = "application/xml"


@dataclass
class ExportedFile:
    file_name: str
    content_type: str
    content: bytes


def export_file_name(generated_on: date, prefix: Optional[str] = None) -> str:
    """remesa_sepa_2025-03-01.xml"""
    return f"{prefix or settings.export_file_prefix}_{format_date(generated_on)}.xml"


def export_document(xml: str, generated_on: date, prefix: Optional[str] = None) -> ExportedFile:
    return ExportedFile(
        file_name=export_file_name(generated_on, prefix),
        content_type=XML_CONTENT_TYPE,
        content=xml.encode("utf-8"),
    )
