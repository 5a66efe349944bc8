# Contains main normalization logic
from .analyzer import JsonStructureAnalyzer
from .identifiers import IdentifierAssigner
from .resolver import RelationshipResolver
from .row_generator import RowGenerator
from .schema import InferenceSession
from .tree import DocumentTree, TreeBuilder


class JsonNormalizer:
    """
    Handles the normalization of JSON data into relational tables.
    """

    @staticmethod
    def infer_schema(json_data, merge_tables=True, entity_aliases=None):
        """
        Run the schema passes (ids, shapes, names) without generating rows.

        Args:
            json_data: JSON text, a parsed JSON value or a DocumentTree
            merge_tables: Whether tables describing the same entity are merged
            entity_aliases: Groups of table names that denote one entity

        Returns:
            InferenceSession: the resolved schema, ready for row generation
        """
        if isinstance(json_data, DocumentTree):
            tree = json_data
        else:
            tree = TreeBuilder().build(json_data)

        # Number every object, then discover the tables
        IdentifierAssigner(tree).assign()
        session = InferenceSession(tree)
        JsonStructureAnalyzer(session).analyze()

        # Give tables their final names and fold duplicates together
        RelationshipResolver(session, merge_tables=merge_tables, entity_aliases=entity_aliases).resolve()

        return session

    @staticmethod
    def normalize_json_to_tables(json_data, merge_tables=True, entity_aliases=None, writer=None):
        """
        Convert any JSON structure to relational tables.

        Args:
            json_data: JSON text, a parsed JSON value or a DocumentTree
            merge_tables: Whether tables describing the same entity are merged
            entity_aliases: Groups of table names that denote one entity
            writer: Optional streaming CsvTableWriter; when given, rows are
                written as they are generated instead of being buffered

        Returns:
            InferenceSession: live tables via session.live_tables(), with rows
                filled in when no writer was given
        """
        session = JsonNormalizer.infer_schema(json_data, merge_tables, entity_aliases)
        RowGenerator(session, writer).generate()
        return session
