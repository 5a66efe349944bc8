# Contains delimited file output for the generated tables
import logging
import os
from contextlib import ExitStack

import pandas as pd

from ..core.errors import OutputLocationError
from ..core.schema import make_file_safe

logger = logging.getLogger(__name__)


class CsvTableWriter:
    """
    Writes each table to <output_dir>/<table name>.<extension>.

    In streaming mode a table's file is opened, and its header written, the
    first time a row targets it; rows are then appended in chunks of
    chunk_size and the file stays open until close().
    In batch mode write_tables() writes every table in one go.

    A table whose file cannot be opened is reported and skipped, the other
    tables are still written.
    """

    def __init__(self, output_dir, streaming=True, delimiter=",", extension="csv", chunk_size=500):
        """
        Args:
            output_dir: Existing directory the files go into
            streaming: If True, rows are appended as they are generated
            delimiter: Field separator, a single character
            extension: File extension, without the dot
            chunk_size: Rows held per table before they are appended to its file
        """
        if not isinstance(delimiter, str) or len(delimiter) != 1 or delimiter in '"\r\n':
            raise ValueError(f"Delimiter must be a single character other than a quote or line break: {delimiter!r}")
        if output_dir and not os.path.isdir(output_dir):
            raise OutputLocationError(f"Output directory does not exist: {output_dir}")

        self.output_dir = output_dir
        self.streaming = streaming
        self.delimiter = delimiter
        self.extension = extension
        self.chunk_size = max(1, chunk_size)
        self.errors = []  # (table name, message) for every table that was skipped
        self.paths = {}  # table name -> file written
        self._handles = {}
        self._pending = {}  # table key -> (table, rows not yet written)
        self._claimed = {}  # path -> key of the table writing it
        self._failed = set()
        self._stack = ExitStack()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        """Write any held rows, then close every file opened in streaming mode."""
        try:
            for key in list(self._pending):
                self._flush(key)
        finally:
            self._stack.close()
            self._handles = {}
            self._pending = {}

    def path_for(self, table_name):
        return os.path.join(self.output_dir, f"{make_file_safe(table_name)}.{self.extension}")

    def write_row(self, table, row):
        """
        Append one row to a table's file, opening it on first use.

        Args:
            table: TableSchema the row belongs to
            row: Field values aligned with table.columns
        """
        if table.key in self._failed:
            return
        if table.key not in self._handles:
            handle = self._open(table)
            if handle is None:
                return
            self._handles[table.key] = handle
            self._pending[table.key] = (table, [])
            self._frame([], table.columns).to_csv(handle, **self._csv_options())

        rows = self._pending[table.key][1]
        rows.append(row)
        if len(rows) >= self.chunk_size:
            self._flush(table.key)

    def write_tables(self, tables):
        """
        Write complete tables, header then buffered rows.

        Args:
            tables: TableSchemas with their rows filled in

        Returns:
            list: names of the tables that were written
        """
        written = []
        for table in tables:
            handle = self._open(table)
            if handle is None:
                continue
            with handle:
                self._frame(table.rows, table.columns).to_csv(handle, **self._csv_options())
            written.append(table.name)
        return written

    def _flush(self, table_key):
        table, rows = self._pending[table_key]
        if not rows:
            return
        handle = self._handles[table_key]
        self._frame(rows, table.columns).to_csv(handle, header=False, **self._csv_options())
        handle.flush()
        rows.clear()

    def _open(self, table):
        if not self.output_dir:
            self._report(table, "no output directory configured")
            return None

        path = self.path_for(table.name)
        owner = self._claimed.get(path)
        if owner is not None and owner != table.key:
            self._report(table, f"{path} is already written by table {owner}")
            return None
        try:
            handle = open(path, "w", newline="", encoding="utf-8")
        except OSError as e:
            self._report(table, f"could not open {path}: {e}")
            return None

        if self.streaming:
            self._stack.enter_context(handle)
        self._claimed[path] = table.key
        self.paths[table.name] = path
        return handle

    def _report(self, table, message):
        logger.error("Skipping table %s: %s", table.name, message)
        self.errors.append((table.name, message))
        self._failed.add(table.key)

    def _frame(self, rows, columns):
        return pd.DataFrame(rows, columns=columns, dtype=object)

    def _csv_options(self):
        # Both line break characters are in the terminator, so QUOTE_MINIMAL quotes either
        return {
            "sep": self.delimiter,
            "index": False,
            "lineterminator": "\r\n",
        }
