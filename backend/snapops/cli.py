"""
Command line entry point.

    snapops --vm-list vms.txt --ticket INC123456

Exit status is 0 whenever the run completes, however many disks failed.
Missing VM list, failed authentication and an empty subscription set each
exit with their own non-zero status and produce no report.
"""
import argparse
import os
import logging
import sys

from snapops.core.config import settings, validate_settings
from snapops.core.azure_client import AzureClient
from snapops.core.exceptions import RunAborted
from snapops.schemas.snapshot import NamingPolicy, LocatorPolicy
from snapops.services.snapshot_service import SnapshotRunService
from snapops.services.report_service import ReportService, format_summary
from snapops.services.vm_list import read_vm_list

logger = logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="snapops",
        description="Create Azure managed disk snapshots for a list of VMs and write a CSV report."
    )
    parser.add_argument("--vm-list", default=None, help="File with one VM name per line")
    parser.add_argument("--ticket", required=True, help="Change or incident reference embedded in snapshot names")
    parser.add_argument("--output-dir", default=None, help="Directory for the CSV report")
    parser.add_argument("--naming-policy", choices=[p.value for p in NamingPolicy], default=None)
    parser.add_argument("--locator-policy", choices=[p.value for p in LocatorPolicy], default=None)
    parser.add_argument("--max-length", type=positive_int, default=None, help="Maximum snapshot name length")
    parser.add_argument("--target-resource-group", default=None,
                        help="Resource group for new snapshots (default: the VM's own group)")
    parser.add_argument("--incremental", action="store_true", default=None, help="Create incremental snapshots")
    parser.add_argument("--upload", action="store_true", help="Also upload the report to blob storage")
    parser.add_argument("--log-level", default=None, help="Logging level (default: LOG_LEVEL setting)")
    return parser


def main(argv=None, azure_client=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        validate_settings()
    except ValueError as e:
        logger.error(str(e))
        return EXIT_CONFIG_ERROR

    ticket = args.ticket.strip()
    if not ticket:
        logger.error("Ticket reference must not be blank")
        return EXIT_CONFIG_ERROR

    try:
        vm_names = read_vm_list(args.vm_list)
        service = SnapshotRunService(
            azure_client or AzureClient(),
            naming_policy=args.naming_policy,
            locator_policy=args.locator_policy,
            max_length=args.max_length,
            incremental=args.incremental,
            target_resource_group=args.target_resource_group
        )
        result = service.run(vm_names, ticket)
    except RunAborted as e:
        logger.error(f"Run aborted: {e}")
        return e.exit_code

    print(format_summary(result.summary))

    report_service = ReportService()
    try:
        report_path = report_service.write_report(result.entries, ticket, output_dir=args.output_dir)
    except OSError as e:
        logger.error(f"Failed to write report: {e}")
        return 0

    print(f"Report: {report_path}")
    if args.upload:
        report_service.upload_report(result.entries, os.path.basename(report_path))
    return 0


if __name__ == "__main__":
    sys.exit(main())
