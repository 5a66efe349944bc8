# Contains class for turning the analyzed tree into table rows
import logging

from .schema import ID_COLUMN, SEQ_COLUMN, VALUE_COLUMN, InferenceSession, TableSchema
from .tree import NodeKind

logger = logging.getLogger(__name__)


class RowGenerator:
    """
    Emits one row per object and one row per scalar array element.

    The walk mirrors the analyzer's, so rows of every table come out in
    document order. Without a writer rows are buffered on their TableSchema
    (batch mode); with one each row is handed to writer.write_row as soon as
    it is complete (streaming mode).
    """

    def __init__(self, session: InferenceSession, writer=None):
        self.session = session
        self.tree = session.tree
        self.writer = writer
        self.row_count = 0

    def generate(self):
        """
        Generate every row of the document.

        Returns:
            int: number of rows emitted
        """
        if self.tree.root == -1:
            return 0

        root = self.tree.node(self.tree.root)
        if root.kind == NodeKind.OBJECT:
            self._rows_from_object(self.tree.root)
        elif root.kind == NodeKind.ARRAY:
            self._rows_from_array(self.tree.root)
        return self.row_count

    def _rows_from_object(self, index):
        node = self.tree.expect(index, NodeKind.OBJECT)
        table = self.session.resolve(node.table_name)

        values = {ID_COLUMN: str(node.id)}

        # Link to the parent row, if this object has one
        if node.parent_id > 0:
            parent_table = self.session.resolve(node.parent_table)
            for fk in table.foreign_keys:
                if fk.is_parent_link and self.session.resolve(fk.target) is parent_table:
                    values[fk.column] = str(node.parent_id)
                    break

        if node.array_index >= 0 and table.has_column(SEQ_COLUMN):
            values[SEQ_COLUMN] = str(node.array_index)

        filled = {}
        for key, child_index in node.pairs:
            child = self.tree.node(child_index)
            if child.is_scalar:
                column = table.field_columns.get(key.strip())
                if column is not None:
                    # "a" and " a" share a column; the later pair wins, as with duplicate keys
                    if column in filled:
                        logger.warning("Object %d: key %r overwrites %r in column %s of table %s",
                                       node.id, key, filled[column], column, table.name)
                    filled[column] = key
                    values[column] = child.text()
            elif child.kind == NodeKind.OBJECT:
                # Ids are known up front, so the nested row's key goes in before emitting
                fk = self._child_link(table, key, child.table_name)
                if fk is not None:
                    values[fk.column] = str(child.id)

        self._emit(table, values)

        # Process nested structures
        for key, child_index in node.pairs:
            child = self.tree.node(child_index)
            if child.kind == NodeKind.OBJECT:
                self._rows_from_object(child_index)
            elif child.kind == NodeKind.ARRAY:
                self._rows_from_array(child_index)

    def _rows_from_array(self, index):
        array = self.tree.expect(index, NodeKind.ARRAY)

        if self.tree.is_object_array(index):
            for element_index in array.elements:
                self._rows_from_object(element_index)

        elif self.tree.is_scalar_array(index) and array.table_name:
            table = self.session.resolve(array.table_name)
            parent_table = self.session.resolve(array.parent_table)
            parent_column = None
            for fk in table.foreign_keys:
                if fk.is_parent_link and self.session.resolve(fk.target) is parent_table:
                    parent_column = fk.column
                    break

            for position, element_index in enumerate(array.elements):
                element = self.tree.node(element_index)
                # Junction ids count rows of this table, not document objects
                values = {
                    ID_COLUMN: str(table.next_row_id),
                    SEQ_COLUMN: str(position),
                    VALUE_COLUMN: element.text(),
                }
                table.next_row_id += 1
                if parent_column is not None:
                    values[parent_column] = str(array.parent_id)
                self._emit(table, values)

    def _child_link(self, table: TableSchema, key, child_table_key):
        child_table = self.session.resolve(child_table_key)
        for fk in table.foreign_keys:
            if fk.field == key.strip() and self.session.resolve(fk.target) is child_table:
                return fk
        return None

    def _emit(self, table: TableSchema, values):
        row = [values.get(column, "") for column in table.columns]
        self.row_count += 1
        if self.writer is not None:
            self.writer.write_row(table, row)
        else:
            table.rows.append(row)
