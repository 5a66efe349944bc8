from .normalizer import JsonNormalizer
from .analyzer import JsonStructureAnalyzer
from .identifiers import IdentifierAssigner
from .resolver import RelationshipResolver
from .row_generator import RowGenerator
from .schema import InferenceSession, TableSchema, TableKind
from .tree import DocumentTree, TreeBuilder, build_tree, format_tree

__all__ = [
    'JsonNormalizer',
    'JsonStructureAnalyzer',
    'IdentifierAssigner',
    'RelationshipResolver',
    'RowGenerator',
    'InferenceSession',
    'TableSchema',
    'TableKind',
    'DocumentTree',
    'TreeBuilder',
    'build_tree',
    'format_tree',
]
