"""Export module for KPI reports and thread tables."""

from .exporters import export_kpis_to_json, export_records_to_csv, records_to_dataframe

__all__ = [
    "export_kpis_to_json",
    "export_records_to_csv",
    "records_to_dataframe",
]
