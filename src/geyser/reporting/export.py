"""Export functionality for CSV and JSON."""

import json
from dataclasses import asdict
from typing import List

import pandas as pd

from ..engine.accounting import GeyserState
from ..engine.events import Event
from ..simulation.runner import SimulationResult

TOKEN_COLUMNS = ('total_locked', 'total_unlocked', 'total_staked', 'staking_custody', 'distribution_custody')


def states_to_dataframe(states: List[GeyserState], decimals: int = 18) -> pd.DataFrame:
    """
    Tabulate engine states, one row per state.

    Token buckets are converted to whole tokens (float); share counts and
    share-seconds are kept as exact Python integers.
    """
    scale = 10**decimals
    data = []
    for state in states:
        row = state.to_dict()
        for column in TOKEN_COLUMNS:
            row[f'{column}_tokens'] = row[column] / scale
        data.append(row)
    return pd.DataFrame(data)


def events_to_dataframe(events: List[Event], decimals: int = 18) -> pd.DataFrame:
    """Tabulate events with their name and whole-token amount."""
    scale = 10**decimals
    data = []
    for event in events:
        row = {'event': event.name, **asdict(event)}
        row.pop('data', None)
        if 'amount' in row:
            row['amount_tokens'] = row['amount'] / scale
        data.append(row)
    return pd.DataFrame(data)


def export_csv(result: SimulationResult, filepath: str):
    """Export simulation states to CSV."""
    df = states_to_dataframe(result.states, result.config.simulation.decimals)
    df.to_csv(filepath, index=False)


def export_events_csv(result: SimulationResult, filepath: str):
    """Export simulation events to CSV."""
    df = events_to_dataframe(result.events, result.config.simulation.decimals)
    df.to_csv(filepath, index=False)


def export_json(result: SimulationResult, filepath: str):
    """Export simulation results to JSON with exact integer amounts."""
    export_data = {
        'config': result.config.to_dict(),
        'config_hash': result.config.compute_hash(),
        'scenario': result.scenario.name,
        'states': [state.to_dict() for state in result.states],
        'events': [
            {'event': event.name, **{k: v for k, v in asdict(event).items() if k != 'data'}}
            for event in result.events
        ],
        'claims': result.claims,
        'final_metrics': result.final_metrics,
        'failures': result.failures,
        'conservation_errors': result.conservation_errors,
    }

    with open(filepath, 'w') as f:
        json.dump(export_data, f, indent=2)
