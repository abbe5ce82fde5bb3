#!/usr/bin/env python3
"""
Lead Export Script

Exports leads from the configured backend (or the demo data in mock mode) to
the same CSV format the dashboard download uses.

Usage:
    python export_leads.py --output leads_export.csv
    python export_leads.py --status quoted --output quoted_leads.csv
    python export_leads.py --query ramesh --output ramesh.csv
"""

from __future__ import annotations

import argparse
import sys
from collections import Counter
from pathlib import Path
from typing import List

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.lead import Lead, LeadStatus
from repositories.client import load_settings
from services.csv_export_service import CSV_COLUMNS, generate_leads_csv
from services.event_bus import EventBus
from services.lead_service import create_lead_service


def export_leads_to_csv(leads: List[Lead], output_path: str) -> None:
    """
    Write leads to a CSV file.

    Raises:
        ValueError: If leads list is empty
    """
    if not leads:
        raise ValueError("No leads to export")

    print(f"Exporting {len(leads)} leads to {output_path}")
    print(f"CSV will contain {len(CSV_COLUMNS)} columns")

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        f.write(generate_leads_csv(leads))

    print(f"✓ Successfully exported {len(leads)} leads")


def main() -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Export CRM leads to CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Export all leads
  python export_leads.py --output all_leads.csv

  # Export only won leads
  python export_leads.py --status won --output won_leads.csv

  # Export leads whose name or phone matches
  python export_leads.py --query 98123 --output matches.csv
        """
    )

    parser.add_argument(
        "--output",
        "-o",
        required=True,
        help="Path to output CSV file"
    )

    parser.add_argument(
        "--status",
        "-s",
        choices=[status.value for status in LeadStatus],
        help="Filter by pipeline status"
    )

    parser.add_argument(
        "--query",
        "-q",
        help="Case-insensitive name match or phone substring"
    )

    args = parser.parse_args()

    try:
        settings = load_settings()
        service = create_lead_service(settings, EventBus())

        print(f"Fetching leads ({'mock data' if settings.mock_mode else settings.api_url})...")
        print(f"  Status filter: {args.status or 'None (all)'}")
        print(f"  Search: {args.query or 'None'}")
        print()

        status = LeadStatus(args.status) if args.status else None
        leads = service.export_leads(status=status, text=args.query)

        if not leads:
            print("No leads found matching the specified filters")
            return 1

        export_leads_to_csv(leads, args.output)

        print()
        print("=" * 60)
        print("EXPORT SUMMARY")
        print("=" * 60)
        print(f"Total leads exported: {len(leads)}")

        counts = Counter(lead.status for lead in leads)
        for status in LeadStatus:
            if counts[status]:
                print(f"  {status.value:<17} {counts[status]}")
        print()
        print(f"Output file: {args.output}")
        print("=" * 60)

        return 0

    except KeyboardInterrupt:
        print("\n\nExport interrupted by user")
        return 130

    except Exception as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
