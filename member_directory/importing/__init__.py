from member_directory.importing.importer import (
    DEFAULT_CHUNK_SIZE,
    ChunkedImporter,
    ImportChunk,
    partition,
)
from member_directory.importing.normalizer import (
    NormalizedRows,
    coerce_value,
    normalize_key,
    normalize_row,
    normalize_rows,
    parse_date,
)
from member_directory.importing.sources import (
    TEMPLATE_COLUMNS,
    load_rows,
    write_template,
)

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "TEMPLATE_COLUMNS",
    "ChunkedImporter",
    "ImportChunk",
    "NormalizedRows",
    "coerce_value",
    "load_rows",
    "normalize_key",
    "normalize_row",
    "normalize_rows",
    "parse_date",
    "partition",
    "write_template",
]
