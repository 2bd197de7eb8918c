"""Tabular export and charts for simulation results."""

from .charts import create_claims_chart, create_pool_chart
from .export import (
    events_to_dataframe,
    export_csv,
    export_events_csv,
    export_json,
    states_to_dataframe,
)

__all__ = [
    "create_claims_chart",
    "create_pool_chart",
    "events_to_dataframe",
    "export_csv",
    "export_events_csv",
    "export_json",
    "states_to_dataframe",
]
