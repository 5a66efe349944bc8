# Contains the main entry point
from .core.normalizer import JsonNormalizer
from .output.csv_writer import CsvTableWriter


def process_json_to_csv(json_data, output_dir, streaming=True, merge_tables=True,
                        entity_aliases=None, delimiter=",", extension="csv"):
    """
    Converts JSON data into relational tables and writes one file per table.

    Args:
        json_data: The JSON data to process (string, parsed value or DocumentTree)
        output_dir: Existing directory the table files are written to
        streaming: Write rows while they are generated instead of buffering them
        merge_tables: Fold tables that describe the same entity into one
        entity_aliases: Groups of table names that denote one entity
        delimiter: Field separator
        extension: File extension for the table files

    Returns:
        tuple: (table_names, errors) where:
            - table_names: Final names of the tables that make up the output
            - errors: (table name, message) pairs for tables that could not be written
    """
    with CsvTableWriter(output_dir, streaming=streaming, delimiter=delimiter, extension=extension) as writer:
        if streaming:
            session = JsonNormalizer.normalize_json_to_tables(
                json_data, merge_tables=merge_tables, entity_aliases=entity_aliases, writer=writer
            )
        else:
            # Buffer every row first, then write the tables one by one
            session = JsonNormalizer.normalize_json_to_tables(
                json_data, merge_tables=merge_tables, entity_aliases=entity_aliases
            )
            writer.write_tables(session.live_tables())

    return session.table_names(), writer.errors
