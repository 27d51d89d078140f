"""
Script to generate the productivity report from the configured database.

Usage:
    python scripts/generate_report.py [output_file] [--template NAME]
"""

import sys
import asyncio
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.infra.config import get_settings, setup_logging
from app.infra.db import init_db
from app.services import ReportService, SyncService
from app.services.report_service import DEFAULT_TEMPLATE


async def main():
    args = sys.argv[1:]
    template_name = DEFAULT_TEMPLATE
    if "--template" in args:
        index = args.index("--template")
        if index + 1 >= len(args):
            print("Usage: python generate_report.py [output_file] [--template NAME]")
            sys.exit(1)
        template_name = args[index + 1]
        del args[index:index + 2]

    output_file = Path(args[0]) if args else None

    settings = get_settings()
    await init_db()

    service = ReportService()
    if template_name not in service.list_templates():
        print(f"Error: Template '{template_name}' not found in {service.template_dir}")
        sys.exit(1)

    report = await service.generate_report(SyncService(settings.user_id),
                                           template_name=template_name,
                                           output_file=output_file)
    if output_file:
        print(f"Report successfully saved to: {output_file.absolute()}")
    else:
        print(report)


if __name__ == "__main__":
    setup_logging("WARNING")
    asyncio.run(main())
