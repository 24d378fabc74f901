"""CLI utility functions"""

from .output import (
    console,
    err_console,
    format_pipeline_result,
    format_violations,
    format_diff_report,
    print_command_output,
    print_error,
    print_warning,
    print_info,
    print_success,
)

__all__ = [
    # Consoles
    'console',
    'err_console',

    # Result formatting
    'format_pipeline_result',
    'format_violations',
    'format_diff_report',
    'print_command_output',

    # Messages
    'print_error',
    'print_warning',
    'print_info',
    'print_success',
]
