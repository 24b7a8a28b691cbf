"""
Error handling utilities for the SBOM ingest CLI.

This module contains functions for standardized error handling and formatting
across all CLI handlers.
"""

import logging
import argparse
import functools
from typing import Callable

from ..exceptions import (
    SbomIngestError,
    ParseError,
    InvalidJsonError,
    UnsupportedFormatError,
    MissingRequiredFieldError,
    VersionUnsupportedError,
    ConfigurationError,
    FileSystemError,
)

logger = logging.getLogger("sbom-ingest")


def format_and_print_error(error: Exception, handler_name: str, params: argparse.Namespace):
    """
    Formats and prints a standardized error message for CLI users.

    Args:
        error: The exception that occurred
        handler_name: Name of the handler where the error occurred
        params: Command line parameters
    """
    command = getattr(params, 'command', 'unknown')
    path = getattr(params, 'path', '<not specified>')

    error_message = getattr(error, 'message', str(error))
    error_code = getattr(error, 'code', None)
    error_details = getattr(error, 'details', {})

    if isinstance(error, InvalidJsonError):
        print(f"\n❌ The file is not valid JSON")
        print(f"   {error_message}")
        print(f"\n💡 Please check:")
        print(f"   • The file is a JSON SBOM (XML, RDF and tag-value are not supported)")
        print(f"   • The file was not truncated: {path}")

    elif isinstance(error, UnsupportedFormatError):
        print(f"\n❌ Unsupported document format")
        print(f"   {error_message}")
        print(f"\n💡 Please check:")
        print(f"   • CycloneDX documents declare \"bomFormat\": \"CycloneDX\" and a specVersion")
        print(f"   • SPDX documents declare an spdxVersion such as \"SPDX-2.3\"")

    elif isinstance(error, MissingRequiredFieldError):
        print(f"\n❌ Required field missing")
        print(f"   {error_message}")
        print(f"\n💡 Add the '{error.field}' field to the document and try again")

    elif isinstance(error, VersionUnsupportedError):
        print(f"\n❌ Unsupported schema version")
        print(f"   {error_message}")
        print(f"\n💡 Convert the document to a supported version")

    elif isinstance(error, ParseError):
        print(f"\n❌ Failed to parse '{path}'")
        print(f"   {error_message}")

    elif isinstance(error, FileSystemError):
        print(f"\n❌ File system error")
        print(f"   {error_message}")
        print(f"\n💡 Please check:")
        print(f"   • File permissions are correct")
        print(f"   • All specified paths exist")
        print(f"   • Path specified: {path}")

    elif isinstance(error, ConfigurationError):
        print(f"\n❌ Configuration error")
        print(f"   {error_message}")
        print(f"\n💡 Please check your command-line arguments and SBOM_INGEST_* environment variables")

    else:
        print(f"\n❌ Error executing '{command}' command: {error_message}")

    if error_code:
        print(f"\nError code: {error_code}")

    if getattr(params, 'log', 'INFO') == 'DEBUG' and error_details:
        print("\nDetailed error information:")
        for key, value in error_details.items():
            print(f"  • {key}: {value}")
    else:
        print(f"\nFor more details, run with --log DEBUG for verbose output")


def handler_error_wrapper(handler_func: Callable) -> Callable:
    """
    A decorator that wraps handler functions with standardized error handling.

    Expected errors are printed in a friendly form and re-raised so main() can
    pick the exit code. Anything else is logged with its traceback and
    re-raised as an SbomIngestError.

    Example:
        @handler_error_wrapper
        def handle_parse(params):
            ...
    """
    @functools.wraps(handler_func)
    def wrapper(params):
        try:
            handler_name = handler_func.__name__
            command_name = params.command if hasattr(params, 'command') else 'unknown'
            logger.debug(f"Starting {handler_name} for command '{command_name}'")

            return handler_func(params)

        except SbomIngestError as e:
            logger.debug(f"Expected error in {handler_func.__name__}: {type(e).__name__}: {getattr(e, 'message', str(e))}")
            format_and_print_error(e, handler_func.__name__, params)
            raise

        except Exception as e:
            logger.error(f"Unexpected error in {handler_func.__name__}: {e}", exc_info=True)

            cli_error = SbomIngestError(
                f"Failed to execute {params.command if hasattr(params, 'command') else 'command'}: {str(e)}",
                details={"error": str(e), "handler": handler_func.__name__}
            )
            format_and_print_error(cli_error, handler_func.__name__, params)
            raise cli_error from e

    return wrapper
