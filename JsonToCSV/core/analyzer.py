# Contains class for analyzing JSON structure
import logging

from .identifiers import ROOT_TABLE
from .schema import (
    SEQ_COLUMN,
    VALUE_COLUMN,
    InferenceSession,
    TableKind,
    TableSchema,
    foreign_key_name,
)
from .tree import NodeKind

logger = logging.getLogger(__name__)


class JsonStructureAnalyzer:
    """
    Analyzes the document tree to discover one table per nesting position.

    Every object is routed to a table and its scalar fields become columns.
    Nested objects get a table of their own plus a foreign key column in the
    containing table, arrays of objects become child tables and arrays of
    scalars become junction tables. Objects at the same position may differ in
    their keys; the table simply grows a column for each new field.
    """

    def __init__(self, session: InferenceSession):
        self.session = session
        self.tree = session.tree

    def analyze(self):
        """
        Walk the whole tree once and build the table schemas.

        Returns:
            dict: the session's tables keyed by provisional name
        """
        if self.tree.root == -1:
            return self.session.tables

        root = self.tree.node(self.tree.root)
        if root.kind == NodeKind.OBJECT:
            table = self.session.create_table("", ROOT_TABLE, TableKind.ROOT)
            self._analyze_object(self.tree.root, table)
        elif root.kind == NodeKind.ARRAY:
            if self.tree.is_object_array(self.tree.root):
                # Each element of a top-level array is a row of the root table
                table = self.session.create_table("", ROOT_TABLE, TableKind.ROOT)
                table.add_column(SEQ_COLUMN)
                for element_index in root.elements:
                    self._analyze_object(element_index, table)
            else:
                logger.warning("Top-level array holds no objects; no tables were produced")
        else:
            logger.warning("Top-level %s value has no fields; no tables were produced", root.kind.value)

        return self.session.tables

    def _analyze_object(self, index, table: TableSchema):
        """Route an object into table, widen the table, then descend."""
        node = self.tree.expect(index, NodeKind.OBJECT)
        node.table_name = table.key

        # Store primitive values first so they precede any foreign key columns
        for key, child_index in node.pairs:
            if self.tree.node(child_index).is_scalar:
                table.add_field(key)

        for key, child_index in node.pairs:
            child = self.tree.node(child_index)
            if child.kind == NodeKind.OBJECT:
                child_table = self._child_table(table, key, TableKind.OBJECT)
                child.parent_table = table.key
                self._analyze_object(child_index, child_table)
                # The containing table points at the nested row
                table.add_foreign_key(foreign_key_name(child_table.name), child_table.key, key.strip())
            elif child.kind == NodeKind.ARRAY:
                child.parent_table = table.key
                self._analyze_array(child_index, table, key)

    def _analyze_array(self, index, table: TableSchema, key):
        """Decide what an array under key of table turns into."""
        array = self.tree.expect(index, NodeKind.ARRAY)

        if self.tree.is_object_array(index):
            child_table = self._child_table(table, key, TableKind.ARRAY)
            child_table.add_column(SEQ_COLUMN)
            for element_index in array.elements:
                self.tree.node(element_index).parent_table = table.key
                self._analyze_object(element_index, child_table)

        elif self.tree.is_scalar_array(index):
            junction = self._child_table(table, key, TableKind.JUNCTION)
            junction.add_column(SEQ_COLUMN)
            junction.add_column(VALUE_COLUMN)
            array.table_name = junction.key

        else:
            # Empty, mixed and nested arrays are not decomposed
            logger.debug("Skipping array %r under table %r: not all objects or all scalars",
                         key, table.key)

    def _child_table(self, parent: TableSchema, key, kind) -> TableSchema:
        """Get the table for this position, creating it with its parent link on first sight."""
        key = key.strip()
        table = self.session.route_table(parent.key, key, kind)
        if table is None:
            table = self.session.create_table(parent.key, key, kind)
            table.add_foreign_key(foreign_key_name(parent.name), parent.key)
            logger.debug("Discovered %s table %r under %r", kind.value, table.key, parent.key)
        return table
