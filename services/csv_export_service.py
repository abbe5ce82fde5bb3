"""
CSV export service for leads.

Generates the spreadsheet export offered on the leads list:

    Name,Phone,Email,Address,Status,Source,Quote Amount,Created

The header is written bare; every data field is double-quoted (embedded quotes
doubled), one row per lead, in the order supplied.

Security:
- CSV Injection Prevention: free-text fields are sanitized to prevent formula execution
- Security Logging: logs when dangerous characters are stripped
"""

from __future__ import annotations

import csv
import logging
from io import StringIO
from typing import Iterable, List

from domain.lead import Lead

logger = logging.getLogger(__name__)

CSV_COLUMNS: List[str] = [
    "Name",
    "Phone",
    "Email",
    "Address",
    "Status",
    "Source",
    "Quote Amount",
    "Created",
]


def sanitize_csv_field(value: str | None, field_name: str = "unknown") -> str:
    """
    Sanitize field to prevent CSV injection attacks with security logging.

    Strips leading characters that can trigger formula execution in Excel/Sheets:
    =, +, -, @, tab, carriage return

    If dangerous characters are found and stripped, a warning is logged for
    security monitoring.

    Example:
        sanitize_csv_field("=1+1", "name")
        # Returns "1+1" and logs warning about stripped "=" character

        sanitize_csv_field("Normal Name", "name")
        # Returns "Normal Name" (unchanged, no logging)
    """
    if value is None or value == "":
        return ""

    text = str(value).strip()
    original_text = text
    dangerous_chars = {'=', '+', '-', '@', '\t', '\r'}

    stripped_chars = []
    while text and text[0] in dangerous_chars:
        stripped_chars.append(text[0])
        text = text[1:]

    if stripped_chars:
        logger.warning(
            f"CSV injection character(s) stripped from field '{field_name}'",
            extra={
                "field_name": field_name,
                "stripped_characters": "".join(stripped_chars),
                "original_value": original_text[:100],
                "sanitized_value": text[:100],
                "modification_type": "csv_injection_prevention"
            }
        )

    return text


def lead_to_csv_row(lead: Lead) -> List[str]:
    """
    Convert a Lead to a CSV row in CSV_COLUMNS order.

    Status, source, amount and date are system-controlled values and are
    written as-is; name, phone, email and address are user-typed and sanitized.
    """
    quote = ""
    if lead.quote_amount is not None:
        quote = format(lead.quote_amount.normalize(), "f")

    return [
        sanitize_csv_field(lead.name, "name"),
        sanitize_csv_field(lead.phone, "phone"),
        sanitize_csv_field(lead.email, "email"),
        sanitize_csv_field(lead.address, "address"),
        lead.status.value,
        lead.source.value,
        quote,
        lead.created_at.date().isoformat(),
    ]


def generate_leads_csv(leads: Iterable[Lead]) -> str:
    """
    Generate CSV content for the given leads.

    Returns:
        CSV content as a string (header row plus one row per lead)

    Example:
        csv_content = generate_leads_csv(service.all_leads())
        return Response(content=csv_content, media_type="text/csv")
    """
    output = StringIO()
    # Header is bare; data fields are always quoted.
    output.write(",".join(CSV_COLUMNS) + "\n")

    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for lead in leads:
        writer.writerow(lead_to_csv_row(lead))

    return output.getvalue()


__all__ = [
    "CSV_COLUMNS",
    "generate_leads_csv",
    "lead_to_csv_row",
    "sanitize_csv_field",
]
