"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import logging
import sys
import click
from functools import wraps
from typing import Generator
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError, VersionError
)
from .format_utils import format_output, get_format_from_env

logger = logging.getLogger(__name__)


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - Clean data output on stdout (JSONL by default)
    - Diagnostics through logging on stderr
    - Consistent error handling and exit codes

    The wrapped command returns a dict, a list or a generator of dicts to
    be formatted, or None when it handles its own output.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        output_format = kwargs.get('format') or get_format_from_env('jsonl')
        try:
            result = func(*args, **kwargs)

            if result is None:
                pass
            elif isinstance(result, dict):
                for line in format_output(iter([result]), output_format):
                    print(line, flush=True)
            elif isinstance(result, (list, tuple, Generator)):
                for line in format_output(iter(result), output_format):
                    print(line, flush=True)
            else:
                print(result, flush=True)

            sys.exit(SUCCESS)

        except KeyboardInterrupt:
            logger.error("Interrupted by user")
            sys.exit(INTERRUPTED)
        except click.ClickException:
            raise
        except CommandError as e:
            logger.error(str(e))
            error_obj = {
                "error": str(e),
                "type": type(e).__name__,
                "exit_code": e.exit_code
            }
            if isinstance(e, VersionError) and e.errors:
                error_obj['errors'] = e.errors
            print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(e.exit_code)
        except Exception as e:
            logger.error(f"Command failed: {e}")
            error_obj = {
                "error": str(e),
                "type": type(e).__name__
            }
            print(json.dumps(error_obj, ensure_ascii=False), flush=True)
            sys.exit(get_exit_code_for_exception(e))

    return wrapper


format_option = click.option(
    '-f', '--format',
    type=click.Choice(['jsonl', 'json', 'yaml', 'csv']),
    help='Output format (default: jsonl, or from GITCSEMVER_FORMAT env)'
)
