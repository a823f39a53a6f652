# bookkeeping/modules/reporting/service.py
"""
Report generation entry point used by the views.

ReportService is a plain callable service: views hand it a report kind and
a DateFilter and get back the finished PDF bytes (or None). One generation
runs at a time; a request that arrives while another is in flight is
dropped, not queued.
"""
from __future__ import annotations

import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from ...config import OrgProfile
from ...database.snapshots import Snapshots
from . import consolidated_report, debts_report, expenses_report, sales_report
from .date_filter import DateFilter
from .layout import ReportOptions, report_filename
from .logo import load_logo
from .report_data import (
    build_consolidated_report_data,
    build_debts_report_data,
    build_expenses_report_data,
    build_sales_report_data,
)

_log = logging.getLogger(__name__)

SnapshotProvider = Callable[[], Snapshots]
Notifier = Callable[[str, str], None]

IDLE, GENERATING = "idle", "generating"


@dataclass(frozen=True)
class GeneratedReport:
    kind: str
    filename: str
    content: bytes

    def save(self, directory: Path | str, filename: Optional[str] = None) -> Path:
        """Write the PDF atomically; returns the final path."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / (filename or self.filename)
        fd, tmp = tempfile.mkstemp(prefix=".report.", suffix=".tmp", dir=str(directory))
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(self.content)
            os.replace(tmp, target)
        except BaseException:
            try:
                os.unlink(tmp)
            except OSError:
                pass
            raise
        return target


def _debts(snaps: Snapshots, f: DateFilter, org: OrgProfile, now: datetime, opts: ReportOptions) -> bytes:
    return debts_report.render_debts_report(build_debts_report_data(snaps, f, org.product_categories, now), opts)


def _expenses(snaps: Snapshots, f: DateFilter, org: OrgProfile, now: datetime, opts: ReportOptions) -> bytes:
    return expenses_report.render_expenses_report(build_expenses_report_data(snaps, f, now), opts)


def _sales(snaps: Snapshots, f: DateFilter, org: OrgProfile, now: datetime, opts: ReportOptions) -> bytes:
    return sales_report.render_sales_report(build_sales_report_data(snaps, f, org.product_categories, now), opts)


def _consolidated(snaps: Snapshots, f: DateFilter, org: OrgProfile, now: datetime, opts: ReportOptions) -> bytes:
    data = build_consolidated_report_data(snaps, f, org.product_categories, now)
    return consolidated_report.render_consolidated_report(data, opts)


# kind -> (subject used in the file name, renderer)
REPORTS: Dict[str, Tuple[str, Callable[..., bytes]]] = {
    "debts": (debts_report.SUBJECT, _debts),
    "expenses": (expenses_report.SUBJECT, _expenses),
    "sales": (sales_report.SUBJECT, _sales),
    "consolidated": (consolidated_report.SUBJECT, _consolidated),
}


class ReportService:
    """
    States: idle -> generating -> idle. Success and failure are both
    reported through `notifier(level, message)` with level "success" or
    "error"; failures never propagate to the caller.
    """

    def __init__(
        self,
        snapshot_provider: SnapshotProvider,
        org: Optional[OrgProfile] = None,
        logo_path: Optional[Path | str] = None,
        notifier: Optional[Notifier] = None,
        logo_loader: Callable[[Optional[Path | str]], Optional[bytes]] = load_logo,
    ) -> None:
        self.snapshot_provider = snapshot_provider
        self.org = org or OrgProfile()
        self.logo_path = logo_path
        self.notifier = notifier
        self._logo_loader = logo_loader
        self._lock = threading.Lock()
        self.is_generating = False

    @staticmethod
    def available_kinds() -> Tuple[str, ...]:
        return tuple(REPORTS)

    @property
    def state(self) -> str:
        return GENERATING if self.is_generating else IDLE

    def _notify(self, level: str, message: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier(level, message)
        except Exception:
            _log.exception("Reporting.notifier_failed level=%s", level)

    def generate(
        self,
        kind: str,
        date_filter: Optional[DateFilter] = None,
        now: Optional[datetime] = None,
    ) -> Optional[GeneratedReport]:
        if kind not in REPORTS:
            raise ValueError(f"Unknown report kind: {kind!r}")
        if not self._lock.acquire(blocking=False):
            _log.info("Reporting.generate_ignored kind=%s reason=busy", kind)
            return None

        self.is_generating = True
        subject, render = REPORTS[kind]
        try:
            now = now or datetime.now()
            f = date_filter or DateFilter()
            snaps = self.snapshot_provider()
            opts = ReportOptions(org=self.org, logo_png=self._logo_loader(self.logo_path))
            content = render(snaps, f, self.org, now, opts)
            report = GeneratedReport(
                kind=kind,
                filename=report_filename(subject, now, self.org.report_suffix),
                content=content,
            )
        except Exception as exc:
            _log.exception("Reporting.generate_failed kind=%s exc=%s", kind, exc)
            self._notify("error", f"Failed to generate {subject.lower()} report: {exc}")
            return None
        finally:
            self.is_generating = False
            self._lock.release()

        _log.info("Reporting.generated kind=%s file=%s bytes=%d", kind, report.filename, len(report.content))
        self._notify("success", f"{subject} report generated successfully!")
        return report
