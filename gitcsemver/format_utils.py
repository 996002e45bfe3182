"""
Output format utilities for gitcsemver CLI commands.

Provides functions to format data as CSV, YAML, JSON, and JSONL.
"""

import json
import csv
import io
import os
from typing import Dict, List, Any, Iterator, Optional
import yaml

FORMATS = ('jsonl', 'json', 'yaml', 'csv')


def format_output(data: Iterator[Dict[str, Any]], format: str,
                  fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Iterator of dictionaries to format
        format: Output format (json, jsonl, csv, yaml)
        fields: Optional list of fields to include (for CSV)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        yield from format_jsonl(data)
    elif format == "json":
        yield from format_json(data)
    elif format == "csv":
        yield from format_csv(data, fields)
    elif format == "yaml":
        yield from format_yaml(data)
    else:
        raise ValueError(f"Unknown format: {format}")


def format_jsonl(data: Iterator[Dict[str, Any]]) -> Iterator[str]:
    """Format data as JSON Lines (one JSON object per line)."""
    for item in data:
        yield json.dumps(item, ensure_ascii=False)


def format_json(data: Iterator[Dict[str, Any]]) -> Iterator[str]:
    """Format data as a single JSON array."""
    yield json.dumps(list(data), ensure_ascii=False, indent=2)


def format_yaml(data: Iterator[Dict[str, Any]]) -> Iterator[str]:
    """Format data as YAML."""
    yield yaml.safe_dump(list(data), default_flow_style=False, allow_unicode=True, sort_keys=False)


def format_csv(data: Iterator[Dict[str, Any]], fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data as CSV.

    Args:
        data: Iterator of dictionaries
        fields: Optional list of fields to include. If None, uses the fields of the first item.
    """
    data_list = list(data)
    if not data_list:
        return
    if fields is None:
        fields = list(data_list[0].keys())

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fields, extrasaction='ignore', lineterminator='\n')
    writer.writeheader()
    for item in data_list:
        writer.writerow({k: _csv_value(item.get(k)) for k in fields})
    yield buffer.getvalue().rstrip('\n')


def _csv_value(value: Any) -> Any:
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return '' if value is None else value


def get_format_from_env(default: str = 'jsonl') -> str:
    """Output format from GITCSEMVER_FORMAT, or default."""
    fmt = os.environ.get('GITCSEMVER_FORMAT', '').lower()
    return fmt if fmt in FORMATS else default
