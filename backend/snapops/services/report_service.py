import os
import io
import csv
import re
import logging
from datetime import datetime
from typing import List, Optional

from azure.storage.blob import BlobServiceClient, ContentSettings
from azure.core.exceptions import AzureError, ResourceExistsError

from snapops.core.config import settings, Settings
from snapops.schemas.snapshot import ReportEntry, RunSummary

logger = logging.getLogger(__name__)

REPORT_COLUMNS = list(ReportEntry.model_fields.keys())


def report_filename(ticket_reference: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    safe_ticket = re.sub(r'[^A-Za-z0-9._-]', '_', ticket_reference.strip()) or "run"
    return f"snapshot_report_{safe_ticket}_{now.strftime('%Y%m%d_%H%M%S')}.csv"


def render_csv(entries: List[ReportEntry]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=REPORT_COLUMNS)
    writer.writeheader()
    for entry in entries:
        row = entry.model_dump(mode="json")
        if row["error_message"] is None:
            row["error_message"] = ""
        writer.writerow(row)
    return output.getvalue()


def format_summary(summary: RunSummary) -> str:
    """Human-readable summary block, one row per status"""
    rows = summary.as_rows()
    width = max(len(status) for status in rows)
    lines = ["Snapshot run summary"]
    for status, count in rows.items():
        lines.append(f"  {status.ljust(width)} : {count}")
    return "\n".join(lines)


class ReportService:
    """Writes the run report to disk and optionally to blob storage"""

    def __init__(self, config: Optional[Settings] = None, blob_service_client=None):
        self.config = config or settings
        self.blob_service_client = blob_service_client

    def _get_blob_service_client(self):
        if self.blob_service_client is None and self.config.AZURE_STORAGE_CONNECTION_STRING:
            self.blob_service_client = BlobServiceClient.from_connection_string(
                self.config.AZURE_STORAGE_CONNECTION_STRING
            )
        return self.blob_service_client

    def write_report(self, entries: List[ReportEntry], ticket_reference: str,
                     output_dir: Optional[str] = None) -> str:
        output_dir = output_dir or self.config.REPORT_OUTPUT_DIR
        os.makedirs(output_dir, exist_ok=True)
        filename = report_filename(ticket_reference)
        stem, extension = os.path.splitext(filename)
        content = render_csv(entries)
        attempt = 0
        while True:
            path = os.path.join(output_dir, filename)
            try:
                # never replace the report of an earlier run
                with open(path, "x", newline="", encoding="utf-8") as f:
                    f.write(content)
                break
            except FileExistsError:
                attempt += 1
                filename = f"{stem}_{attempt}{extension}"
        logger.info(f"Report written to {path} ({len(entries)} rows)")
        return path

    def upload_report(self, entries: List[ReportEntry], filename: str) -> Optional[str]:
        """Upload the report CSV to blob storage. Returns the blob URL, or None when unavailable."""
        blob_service_client = self._get_blob_service_client()
        if not blob_service_client:
            logger.error("Blob service client not available; set AZURE_STORAGE_CONNECTION_STRING")
            return None

        try:
            container_client = blob_service_client.get_container_client(self.config.AZURE_STORAGE_CONTAINER_NAME)
            try:
                container_client.create_container()
            except ResourceExistsError:
                pass

            blob_client = container_client.get_blob_client(filename)
            blob_client.upload_blob(
                render_csv(entries),
                overwrite=True,
                content_settings=ContentSettings(content_type="text/csv")
            )
            logger.info(f"Report uploaded successfully: {blob_client.url}")
            return blob_client.url
        except AzureError as e:
            logger.error(f"Failed to upload report: {e}")
            return None
