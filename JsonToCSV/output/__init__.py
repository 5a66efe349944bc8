from .csv_writer import CsvTableWriter

__all__ = ['CsvTableWriter']
