# Contains class for naming tables and reconciling duplicate entities
import logging
from typing import Iterable, List, Optional, Tuple

from .identifiers import ROOT_TABLE
from .schema import (
    SEQ_COLUMN,
    VALUE_COLUMN,
    InferenceSession,
    TableKind,
    TableSchema,
    foreign_key_name,
    pluralize,
    singular,
)

logger = logging.getLogger(__name__)

FALLBACK_ROOT_NAME = "entities"


class RelationshipResolver:
    """
    Turns the provisional schema into its final form.

    Nothing structural is discovered here: the root table gets a readable name,
    foreign key columns follow their referenced tables' names, and tables that
    describe the same entity are folded into one. Running it again on a
    resolved schema changes nothing.
    """

    def __init__(self, session: InferenceSession, merge_tables=True,
                 entity_aliases: Optional[Iterable[Iterable[str]]] = None):
        """
        Args:
            session: The inference session produced by the analyzer
            merge_tables: Whether duplicate entity tables are folded together
            entity_aliases: Groups of table names that denote the same entity,
                e.g. [("billing_address", "shipping_address")]
        """
        self.session = session
        self.merge_tables = merge_tables
        self.entity_aliases = [frozenset(group) for group in (entity_aliases or [])]
        self.changes: List[Tuple[str, str, str]] = []

    def resolve(self):
        """
        Resolve names and merges.

        Returns:
            list: (action, old, new) tuples describing every change made;
                empty when the schema was already resolved
        """
        self.changes = []
        self._name_root_table()
        if self.merge_tables:
            self._merge_duplicate_tables()
        return self.changes

    def _name_root_table(self):
        root = self.session.root_table
        # Only a still-provisional root gets named
        if root is None or root.name != ROOT_TABLE:
            return

        data_columns = root.data_columns
        if data_columns:
            new_name = pluralize(data_columns[0])
        else:
            new_name = FALLBACK_ROOT_NAME
        new_name = self.session.unique_name(new_name)

        # Children keep pointing at the document root through root_id
        root.name = new_name
        self.changes.append(("rename", ROOT_TABLE, new_name))
        logger.debug("Renamed root table to %r", new_name)

    def _repoint_references(self, table: TableSchema, target: TableSchema):
        """Make every foreign key to table reference target, named after target."""
        column = foreign_key_name(target.name)
        for fk_owner in self.session.tables.values():
            for fk in list(fk_owner.foreign_keys):
                if self.session.resolve(fk.target) is table:
                    fk.target = target.key
                    self._rename_reference(fk_owner, fk, column)

    def _rename_reference(self, owner: TableSchema, fk, column):
        """Rename a foreign key column, dropping it if it now duplicates another."""
        if fk.column == column:
            return
        for other in owner.foreign_keys:
            if other is not fk and other.column == column \
                    and other.field == fk.field \
                    and self.session.resolve(other.target) is self.session.resolve(fk.target):
                owner.drop_column(fk.column)
                return
        old_column = fk.column
        new_column = owner.rename_column(old_column, column)
        logger.debug("Renamed column %s.%s to %s", owner.name, old_column, new_column)

    # ------------------------------------------------------------------
    # Merging
    # ------------------------------------------------------------------

    def _is_merge_candidate(self, table: TableSchema):
        if table.kind in (TableKind.ROOT, TableKind.JUNCTION):
            return False
        data = set(table.data_columns)
        # A bare [seq, value] shape says nothing about the entity
        return bool(data) and data != {VALUE_COLUMN}

    def _same_entity(self, first: TableSchema, second: TableSchema):
        if singular(first.source_key) == singular(second.source_key):
            return True
        for group in self.entity_aliases:
            first_in = first.source_key in group or first.name in group
            second_in = second.source_key in group or second.name in group
            if first_in and second_in:
                return True
        return False

    def _merge_duplicate_tables(self):
        canonicals: List[TableSchema] = []
        for table in self.session.live_tables():
            if not self._is_merge_candidate(table):
                continue
            shape = set(table.data_columns)
            for canonical in canonicals:
                if set(canonical.data_columns) == shape and self._same_entity(canonical, table):
                    self._merge(table, canonical)
                    break
            else:
                canonicals.append(table)

    def _merge(self, merged: TableSchema, canonical: TableSchema):
        """Fold merged into canonical; rows are routed through session.resolve later."""
        logger.info("Merging table %r into %r", merged.name, canonical.name)

        self._repoint_references(merged, canonical)

        # The canonical table must be able to hold every row of the merged one
        for fk in merged.foreign_keys:
            target = self.session.resolve(fk.target)
            if not any(self.session.resolve(own.target) is target and own.field == fk.field
                       for own in canonical.foreign_keys):
                canonical.add_foreign_key(fk.column, fk.target, fk.field)
        if merged.has_column(SEQ_COLUMN) and not canonical.has_column(SEQ_COLUMN):
            canonical.add_column(SEQ_COLUMN)
        for key, data_column in merged.field_columns.items():
            canonical.field_columns.setdefault(key, data_column)

        merged.merged_into = canonical.key
        self.changes.append(("merge", merged.name, canonical.name))
