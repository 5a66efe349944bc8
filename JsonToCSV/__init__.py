from .core.normalizer import JsonNormalizer
from .core.analyzer import JsonStructureAnalyzer
from .core.errors import JsonToCSVError, OutputLocationError, TreeContractError
from .core.tree import build_tree, format_tree
from .output.csv_writer import CsvTableWriter

from .main import process_json_to_csv

__version__ = "0.1.0"

__all__ = [
    "CsvTableWriter",
    "process_json_to_csv",
    "JsonNormalizer",
    "JsonStructureAnalyzer",
    "JsonToCSVError",
    "OutputLocationError",
    "TreeContractError",
    "build_tree",
    "format_tree",
]
