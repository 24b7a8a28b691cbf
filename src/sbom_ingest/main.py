import sys
import time
import logging

from .cli import parse_cmdline_args
from .exceptions import (
    SbomIngestError,
    ConfigurationError,
    FileSystemError,
    ParseError,
)
from .handlers import (
    handle_detect,
    handle_parse,
    handle_validate,
)
from .utilities.output import format_duration

# Commands whose handler returns a pass/fail verdict rather than just success.
VERDICT_COMMANDS = {"detect", "validate"}


def setup_logging(log_level_name: str, log_file=None) -> logging.Logger:
    """Configure the root logger with a console handler and an optional file handler."""
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)

    handlers = []
    if log_file:
        # Overwrite mode, one log per run
        file_handler = logging.FileHandler(log_file, mode='w')
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)
    return logging.getLogger("sbom-ingest")


def main(argv=None) -> int:
    """
    Main function to parse arguments, set up logging and dispatch to the
    appropriate command handler.
    Returns an exit code (0 for success, non-zero for failure).
    """
    start_time = time.monotonic()
    exit_code = 1
    logger = None

    try:
        params = parse_cmdline_args(argv)
        logger = setup_logging(params.log, params.log_file)

        print("--- SBOM Ingest Configuration ---")
        print(f"Command: {params.command}")
        for k, v in sorted(params.__dict__.items()):
            if k == 'command':
                continue
            print(f"  {k:<20} = {v}")
        print("---------------------------------")
        logger.debug("Parsed parameters: %s", params)

        # --- Command Dispatch ---
        COMMAND_HANDLERS = {
            "detect": handle_detect,
            "parse": handle_parse,
            "validate": handle_validate,
        }

        handler = COMMAND_HANDLERS.get(params.command)

        if handler:
            result = handler(params)

            if params.command in VERDICT_COMMANDS:
                exit_code = 0 if result else 1
                if exit_code == 0:
                    print("\nSBOM Ingest finished successfully.")
                else:
                    print(f"\nSBOM Ingest finished ({params.command.capitalize()} FAILED).")
            else:
                exit_code = 0
                print("\nSBOM Ingest finished successfully.")
        else:
            print(f"Error: Unknown command '{params.command}'.")
            logger.error(f"Unknown command '{params.command}' encountered in main dispatch.")
            exit_code = 1

    # --- Unified Exception Handling ---
    except (ConfigurationError, ParseError) as e:
        # User input problems; the traceback adds nothing
        print(f"\nDetailed Error Information:")
        print(f"Runtime Error: {e.message}")
        if logger: logger.error("%s: %s", type(e).__name__, e.message, exc_info=False)
        return 1
    except FileSystemError as e:
        print(f"\nDetailed Error Information:")
        print(f"Runtime Error: {e.message}")
        if logger: logger.error("%s: %s", type(e).__name__, e.message, exc_info=True)
        return 1
    except SbomIngestError as e:
        print(f"\nDetailed Error Information:")
        print(f"SBOM Ingest Error: {e.message}")
        if logger: logger.error("Unhandled SbomIngestError: %s", e.message, exc_info=True)
        return 1
    except Exception as e:
        print(f"\nDetailed Error Information:")
        print(f"Unexpected Error: {e}")
        if logger: logger.critical("Unexpected error occurred", exc_info=True)
        return 1
    finally:
        duration_str = format_duration(time.monotonic() - start_time)
        print(f"\nTotal Execution Time: {duration_str}")
        if logger: logger.info("Total execution time: %s", duration_str)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
