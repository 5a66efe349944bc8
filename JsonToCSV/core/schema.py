# Contains the table model and the per-run state shared by the passes
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .identifiers import ROOT_TABLE
from .tree import DocumentTree

ID_COLUMN = "id"
SEQ_COLUMN = "seq"
VALUE_COLUMN = "value"
DEFAULT_TABLE_NAME = "items"
DEFAULT_FIELD_NAME = "field"


def singular(name: str) -> str:
    """Strip one trailing 's'. A naming heuristic, not a linguistic one."""
    if len(name) > 1 and name.endswith("s"):
        return name[:-1]
    return name


def pluralize(name: str) -> str:
    return name if name.endswith("s") else name + "s"


def foreign_key_name(table_name: str) -> str:
    return f"{singular(table_name)}_id"


def make_file_safe(name):
    """
    Make a table name usable as a file name.

    Args:
        name: Table name
    Returns:
        str: name with path separators and other unsafe characters replaced
    """
    if not name:
        return '_empty'

    trans = str.maketrans({
        char: '_' for char in '<>:"/\\|?*\0'
    })
    safe_name = str(name).translate(trans)

    # Hidden files and relative path components are not wanted either
    safe_name = f"_{safe_name}" if safe_name.startswith('.') else safe_name

    safe_name = safe_name[:200]

    return safe_name


class TableKind(Enum):
    ROOT = "root"
    OBJECT = "object"      # nested object under a key
    ARRAY = "array"        # array of objects
    JUNCTION = "junction"  # array of scalars


@dataclass
class ForeignKey:
    """
    A column holding the id of a row in another table.

    field is empty for the link to the parent row, otherwise it is the JSON key
    of the nested object whose id the column stores.
    """

    column: str
    target: str
    field: str = ""

    @property
    def is_parent_link(self):
        return not self.field


class TableSchema:
    """
    One output table: its name, ordered columns, keys and (in batch mode) rows.
    """

    def __init__(self, key, kind, source_key, name=None):
        self.key = key  # provisional name, never changes
        self.name = name or key
        self.kind = kind
        self.source_key = source_key
        self.columns: List[str] = [ID_COLUMN]
        self.field_columns: Dict[str, str] = {}  # trimmed JSON key -> column
        self.foreign_keys: List[ForeignKey] = []
        self.rows: List[List[str]] = []
        self.merged_into: Optional[str] = None
        self.next_row_id = 1

    def __repr__(self):
        return f"TableSchema({self.name!r}, columns={self.columns!r})"

    @property
    def is_root(self):
        return self.kind == TableKind.ROOT

    @property
    def data_columns(self):
        """Columns holding JSON field values, in column order."""
        values = set(self.field_columns.values())
        return [column for column in self.columns if column in values]

    @property
    def key_columns(self):
        return {fk.column for fk in self.foreign_keys}

    def has_column(self, column):
        return column in self.columns

    def _free_name(self, column):
        """Return column, or column_2, column_3 ... whichever is not taken yet."""
        if column not in self.columns:
            return column
        suffix = 2
        while f"{column}_{suffix}" in self.columns:
            suffix += 1
        return f"{column}_{suffix}"

    def add_column(self, column):
        if column not in self.columns:
            self.columns.append(column)
        return column

    def add_field(self, key):
        """
        Map a scalar JSON field to a column, appending it on first sight.

        Keys that collide with a synthetic column (id, seq, a foreign key)
        get a numbered column of their own. A blank key is stored under
        DEFAULT_FIELD_NAME.
        """
        key = key.strip()
        if key in self.field_columns:
            return self.field_columns[key]
        column = self._free_name(key or DEFAULT_FIELD_NAME)
        self.columns.append(column)
        self.field_columns[key] = column
        return column

    def add_foreign_key(self, column, target, field=""):
        """Append a foreign key unless an equivalent one already exists."""
        existing = self.find_foreign_key(target, field)
        if existing is not None:
            return existing
        fk = ForeignKey(self._free_name(column), target, field)
        self.columns.append(fk.column)
        self.foreign_keys.append(fk)
        return fk

    def find_foreign_key(self, target, field=""):
        for fk in self.foreign_keys:
            if fk.target == target and fk.field == field:
                return fk
        return None

    def rename_column(self, old, new):
        """Rename a column in place, keeping its position. Returns the name used."""
        if old == new:
            return old
        new = self._free_name(new)
        self.columns[self.columns.index(old)] = new
        for fk in self.foreign_keys:
            if fk.column == old:
                fk.column = new
        for key, column in self.field_columns.items():
            if column == old:
                self.field_columns[key] = new
        return new

    def drop_column(self, column):
        self.columns.remove(column)
        self.foreign_keys = [fk for fk in self.foreign_keys if fk.column != column]


class InferenceSession:
    """
    Everything one conversion run owns: the tree, the table registry, the
    routes used to find tables again, and the merge aliases.

    Tables are registered under their provisional key, which is also what
    nodes store in table_name. resolve() follows merges to the live table.
    """

    def __init__(self, tree: DocumentTree):
        self.tree = tree
        self.tables: Dict[str, TableSchema] = {}
        self.routes: Dict[Tuple[str, str, TableKind], str] = {}

    def route_table(self, parent_key, key, kind) -> Optional[TableSchema]:
        """Find the table already created for this position, if any."""
        table_key = self.routes.get((parent_key, key, kind))
        return self.tables[table_key] if table_key is not None else None

    def unique_name(self, base):
        """
        base, base1, base2 ... whichever no table uses yet.

        Names are compared by the file they would be written to, so "a/b" and
        "a_b" (or "Tags" and "tags") never share an output file.
        """
        def file_key(name):
            return make_file_safe(name).casefold()

        taken = {file_key(table.key) for table in self.tables.values()}
        taken.update(file_key(table.name) for table in self.tables.values())
        name = base
        counter = 1
        while file_key(name) in taken:
            name = f"{base}{counter}"
            counter += 1
        return name

    def create_table(self, parent_key, key, kind) -> TableSchema:
        """Register a new table for a position, named after its JSON key."""
        if kind == TableKind.ROOT:
            base = ROOT_TABLE
        else:
            base = key.strip() or DEFAULT_TABLE_NAME
        table = TableSchema(self.unique_name(base), kind, source_key=key.strip() or base)
        self.tables[table.key] = table
        self.routes[(parent_key, key, kind)] = table.key
        return table

    @property
    def root_table(self) -> Optional[TableSchema]:
        for table in self.tables.values():
            if table.is_root:
                return table
        return None

    def resolve(self, table_key) -> TableSchema:
        """The live table a provisional key ends up in after merges."""
        table = self.tables[table_key]
        while table.merged_into is not None:
            table = self.tables[table.merged_into]
        return table

    def live_tables(self) -> List[TableSchema]:
        return [table for table in self.tables.values() if table.merged_into is None]

    def table_names(self) -> List[str]:
        """Final names of all tables that were not merged away, in discovery order."""
        return [table.name for table in self.live_tables()]
