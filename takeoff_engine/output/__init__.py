# Export and quantity summary module

from .csv_writer import write_measurements_to_csv, generate_csv_filename

from .json_writer import (
    ENGINE_VERSION,
    build_measurement_json,
    build_output_json,
    write_measurements_to_json,
    read_measurements_from_json,
    generate_json_filename,
)

from .summary import (
    ConduitTotal,
    TypeSummary,
    conduit_totals,
    primary_volume,
    summarize_measurements,
    format_summary,
)

__all__ = [
    # CSV
    "write_measurements_to_csv",
    "generate_csv_filename",
    # JSON
    "ENGINE_VERSION",
    "build_measurement_json",
    "build_output_json",
    "write_measurements_to_json",
    "read_measurements_from_json",
    "generate_json_filename",
    # Summary
    "ConduitTotal",
    "TypeSummary",
    "conduit_totals",
    "primary_volume",
    "summarize_measurements",
    "format_summary",
]
