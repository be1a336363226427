"""Main module entrypoint for local runtime execution.

This module validates startup configuration and either launches the FastAPI
service or composes one job invocation from a JSON parameter file.
"""

import argparse
import json
import logging
from pathlib import Path

import uvicorn

from app.bootstrap import bootstrap_create_application, bootstrap_create_composer
from app.config import config_load_settings
from app.domain import JobInvocation, Principal
from app.jobs import InvocationNotSavedError, TargetingConflictError


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
    """

    argument_parser = argparse.ArgumentParser(description="Job invocation composer runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "compose"),
        help="Runtime command: `api` starts server, `compose` persists one invocation from `--params-file`",
        type=str,
    )
    argument_parser.add_argument(
        "--params-file",
        dest="params_file",
        type=Path,
        help="JSON file with the invocation parameter bag for `compose`",
    )
    argument_parser.add_argument(
        "--principal",
        dest="principal",
        type=str,
        help="Requesting user login for `compose`",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    if parsed_arguments.command == "compose":
        if parsed_arguments.params_file is None or not (parsed_arguments.principal or "").strip():
            argument_parser.error("`compose` requires --params-file and --principal")
        raise SystemExit(
            main_compose_from_file(
                params_file=parsed_arguments.params_file,
                principal_login=parsed_arguments.principal.strip(),
            )
        )

    application = bootstrap_create_application()
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
    )


def main_compose_from_file(params_file: Path, principal_login: str) -> int:
    """Compose and save one invocation from a JSON parameter file.

    Args:
        params_file: Path to a JSON object with invocation parameters.
        principal_login: Requesting user login.

    Returns:
        int: Process exit code, 0 on success and 1 when the invocation is rejected or cannot be composed.

    Raises:
        SystemExit: Raised when the parameter file is missing.
    """

    if not params_file.exists():
        raise SystemExit(f"Params file not found: {params_file}")
    with params_file.open("r", encoding="utf-8") as file_handle:
        params = json.load(file_handle)

    invocation = JobInvocation()
    try:
        composer = bootstrap_create_composer(
            invocation=invocation,
            principal=Principal(login=principal_login),
            params=params,
        )
        composer.job_invocation_save()
    except TargetingConflictError as error:
        print(f"TARGETING_CONFLICT: {error}")
        return 1
    except ValueError as error:
        print(f"INVALID_PARAMS: {error}")
        return 1
    except LookupError as error:
        print(f"NOT_FOUND: {error}")
        return 1
    except InvocationNotSavedError as error:
        print("INVOCATION_NOT_SAVED:")
        for line in str(error).splitlines():
            print(f" - {line}")
        return 1

    print(f"Saved job invocation {invocation.job_invocation_id} ({invocation.job_name})")
    return 0


if __name__ == "__main__":
    main()
