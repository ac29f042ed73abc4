"""
Report builder session: the interactive state machine.

    IDLE ──select_entity──▶ ENTITY_SELECTED ──toggle──▶ PREVIEW_LOADING
                                                           │
                                   PREVIEW_READY ◀─────────┤
                                   PREVIEW_FAILED ◀────────┘ (retry_preview)

EXPORTING is entered by ``export()`` from any state once at least one column
is committed, and the session returns to the prior state afterwards.

Previews are debounced. Every fetch carries a sequence number and only the
latest one may apply its result, so a slow response for an old selection
never overwrites a newer one. Preview columns are re-derived from the
committed selection on every change, before any refetch.
"""

import enum
import logging
import threading

from fieldsales.builder import selection as sel
from fieldsales.builder.client import ReportClientError
from fieldsales.builder.debounce import Debouncer
from fieldsales.builder.preview import MAX_PREVIEW_ROWS, build_preview_columns, rekey_rows
from fieldsales.core.export_file import ExportFile
from fieldsales.services.report_catalog import is_known_table

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.2


class BuilderState(str, enum.Enum):
    IDLE = "idle"
    ENTITY_SELECTED = "entity_selected"
    PREVIEW_LOADING = "preview_loading"
    PREVIEW_READY = "preview_ready"
    PREVIEW_FAILED = "preview_failed"
    EXPORTING = "exporting"


class ReportBuilderSession:
    """Single-user builder state. ``transport`` is a CustomReportClient (or fake)."""

    def __init__(self, transport, *, debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
                 preview_limit: int = MAX_PREVIEW_ROWS) -> None:
        self.transport = transport
        self.preview_limit = preview_limit
        self.selection = sel.reset()
        self.active_table: str | None = None
        self.state = BuilderState.IDLE
        self.preview_columns = []
        self.preview_rows: list[dict] = []
        self.error: str | None = None
        self.export_error: str | None = None

        self._lock = threading.Lock()
        self._request_seq = 0
        self._debouncer = Debouncer(self._fetch_preview, debounce_seconds)

    # ── Entity & column changes ──────────────────────────────────────────

    def select_entity(self, table: str) -> None:
        """Make ``table`` the active entity; committed columns are kept."""
        if not is_known_table(table):
            raise ValueError(f"Unknown report entity: {table!r}")
        with self._lock:
            self.active_table = table
            self.preview_rows = []
            self._selection_changed()

    def toggle(self, column: str, table: str | None = None) -> None:
        """Toggle a column of ``table`` (default: the active entity)."""
        with self._lock:
            target = table or self.active_table
            if target is None:
                raise ValueError("No entity selected")
            self.selection = sel.toggle_field(self.selection, target, column)
            self._selection_changed()

    def clear_entity(self, table: str | None = None) -> None:
        with self._lock:
            target = table or self.active_table
            if target is None:
                return
            self.selection = sel.clear_entity(self.selection, target)
            self._selection_changed()

    def reset(self) -> None:
        with self._lock:
            self._debouncer.cancel()
            self._request_seq += 1
            self.selection = sel.reset()
            self.active_table = None
            self.preview_columns = []
            self.preview_rows = []
            self.error = None
            self.state = BuilderState.IDLE

    def checked(self, table: str | None = None) -> list[str]:
        return sel.checked_for(self.selection, table or self.active_table)

    def _selection_changed(self) -> None:
        # caller holds self._lock
        self.preview_columns = build_preview_columns(self.selection, self.active_table)
        # drop toggled-off columns right away; new ones stay None until refetch
        self.preview_rows = [
            {c.id: row.get(c.id) for c in self.preview_columns} for row in self.preview_rows
        ]
        self.error = None
        self._request_seq += 1

        if not self.preview_columns:
            self._debouncer.cancel()
            self.preview_rows = []
            self.state = BuilderState.ENTITY_SELECTED
            return

        self.state = BuilderState.PREVIEW_LOADING
        self._debouncer.schedule(self._request_seq)

    # ── Preview fetching ─────────────────────────────────────────────────

    def flush(self) -> bool:
        """Run a pending debounced preview now, in the caller's thread."""
        return self._debouncer.flush()

    def retry_preview(self) -> None:
        """Manual retry after PREVIEW_FAILED."""
        with self._lock:
            if self.state != BuilderState.PREVIEW_FAILED:
                return
            self._request_seq += 1
            self.state = BuilderState.PREVIEW_LOADING
            self.error = None
            seq = self._request_seq
        self._fetch_preview(seq)

    def _fetch_preview(self, seq: int) -> None:
        with self._lock:
            if seq != self._request_seq:
                return
            table = self.active_table
            columns = [c for c in self.selection if c.table == table]

        try:
            rows = self.transport.preview(columns, table_id=table, limit=self.preview_limit)
        except Exception as exc:
            # may run on the debounce timer thread; a raise there would be lost
            if isinstance(exc, ReportClientError):
                message = exc.text
            else:
                logger.exception("Preview request %d failed", seq)
                message = str(exc) or type(exc).__name__
            with self._lock:
                if seq != self._request_seq:
                    logger.debug("Dropping stale preview failure for request %d", seq)
                    return
                self.state = BuilderState.PREVIEW_FAILED
                self.error = message
                self.preview_rows = []
            return

        with self._lock:
            if seq != self._request_seq:
                logger.debug("Dropping stale preview result for request %d", seq)
                return
            self.preview_rows = rekey_rows(self.preview_columns, rows)
            self.state = BuilderState.PREVIEW_READY

    # ── Export ───────────────────────────────────────────────────────────

    def export(self, fmt: str = "xlsx") -> ExportFile:
        """Export every committed column, across all entities.

        Raises ValueError with nothing selected and ReportClientError when
        the server rejects the export; in both cases the selection and the
        prior state are left as they were.
        """
        with self._lock:
            if not self.selection:
                raise ValueError("Select at least one column to export")
            previous = self.state
            columns = list(self.selection)
            self.state = BuilderState.EXPORTING
            self.export_error = None

        try:
            return self.transport.export(columns, fmt)
        except Exception as exc:
            with self._lock:
                self.export_error = exc.text if isinstance(exc, ReportClientError) else str(exc)
            raise
        finally:
            with self._lock:
                if self.state == BuilderState.EXPORTING:
                    self.state = previous
