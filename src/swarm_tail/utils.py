"""Utility functions for the CLI"""

import json
import yaml
from functools import wraps
from typing import Any, List, Optional
from tabulate import tabulate
import click

from .core.exceptions import AppException


class OutputFormatter:
    """Formats output in various formats"""

    def __init__(self, format_type: str = 'table'):
        self.format_type = format_type

    def format(self, data: Any, headers: Optional[List[str]] = None,
               fields: Optional[List[str]] = None) -> str:
        """Format data based on format type"""
        if self.format_type == 'json':
            return self.format_json(data)
        elif self.format_type == 'yaml':
            return self.format_yaml(data)
        elif self.format_type == 'table':
            return self.format_table(data, headers, fields)
        else:
            return str(data)

    def format_json(self, data: Any) -> str:
        """Format as JSON"""
        return json.dumps(data, indent=2, default=str)

    def format_yaml(self, data: Any) -> str:
        """Format as YAML"""
        return yaml.safe_dump(data, default_flow_style=False)

    def format_table(self, data: Any, headers: Optional[List[str]] = None,
                     fields: Optional[List[str]] = None) -> str:
        """Format as table"""
        if not isinstance(data, list):
            data = [data]

        if not data:
            return "No resources found"

        table_data = []
        for item in data:
            if fields:
                table_data.append([item.get(f, '-') if isinstance(item, dict) else '-'
                                   for f in fields])
            elif isinstance(item, dict):
                table_data.append(list(item.values()))
            else:
                table_data.append([str(item)])

        # Use provided headers or auto-detect
        if not headers:
            if fields:
                headers = [f.upper() for f in fields]
            elif isinstance(data[0], dict):
                headers = [k.upper() for k in data[0].keys()]
            else:
                headers = ['VALUE']

        return tabulate(table_data, headers=headers, tablefmt='simple')


def output_formatter(ctx: click.Context) -> OutputFormatter:
    """Get output formatter from context"""
    format_type = ctx.obj.get('output_format', 'table')
    return OutputFormatter(format_type)


def print_output(ctx: click.Context, data: Any, headers: Optional[List[str]] = None,
                 fields: Optional[List[str]] = None):
    """Print formatted output"""
    formatter = output_formatter(ctx)
    click.echo(formatter.format(data, headers, fields))


def error_handler(func):
    """Decorator turning application errors into a clean exit"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except AppException as e:
            click.echo(f"Error: {e.message}", err=True)
            ctx = click.get_current_context()
            ctx.exit(1)

    return wrapper


def parse_labels(labels: List[str]) -> List[str]:
    """Validate ``key`` / ``key=value`` label selectors"""
    result = []
    for label in labels:
        key = label.split('=', 1)[0].strip()
        if not key:
            raise click.BadParameter(f"Invalid label selector: {label!r}", param_hint='--label')
        result.append(label.strip())

    return result
