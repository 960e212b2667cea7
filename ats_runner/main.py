"""Main module entrypoint for running one ATS test run from a CI shell step.

Exit codes: 0 when all tests passed, 1 when tests failed, 2 when no verdict
could be determined.
"""

import argparse
import logging
import signal
import sys

from ats_runner.adapters import AtsAdapterError
from ats_runner.bootstrap import bootstrap_create_orchestrator
from ats_runner.config import SettingsLoadError, config_load_settings
from ats_runner.jobs import CancellableSleeper

EXIT_PASSED = 0
EXIT_FAILED = 1
EXIT_ERROR = 2

_CANCEL_SIGNALS = (signal.SIGINT, signal.SIGTERM)

logger = logging.getLogger(__name__)


def main_build_argument_parser() -> argparse.ArgumentParser:
    """Build the command-line parser; every flag overrides its environment setting."""

    argument_parser = argparse.ArgumentParser(description="Run ATS tests and report a pass/fail verdict")
    argument_parser.add_argument("--app-id", dest="ats_app_id", type=str, help="ATS application id (ATS_APP_ID)")
    argument_parser.add_argument(
        "--api-token",
        dest="ats_api_token",
        type=str,
        help="ATS application API token (ATS_API_TOKEN)",
    )
    argument_parser.add_argument(
        "--job-template-id",
        dest="ats_job_template_id",
        type=str,
        help="ATS job template id (ATS_JOB_TEMPLATE_ID)",
    )
    argument_parser.add_argument("--base-url", dest="ats_base_url", type=str, help="ATS base URL (ATS_BASE_URL)")
    argument_parser.add_argument(
        "--rerun",
        dest="ats_rerun_automatically",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Rerun not-passed test cases automatically up to 2 times (ATS_RERUN_AUTOMATICALLY)",
    )
    return argument_parser


def main(argv: list[str] | None = None) -> int:
    """Run one orchestration and return the process exit code.

    Args:
        argv: Optional argument list; defaults to `sys.argv[1:]`.

    Returns:
        int: Exit code.
    """

    parsed_arguments = main_build_argument_parser().parse_args(argv)

    try:
        settings = config_load_settings(**vars(parsed_arguments))
    except SettingsLoadError as error:
        print(f"ATS: configuration error: {error}", file=sys.stderr)
        return EXIT_ERROR

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    sleeper = CancellableSleeper()
    orchestrator = bootstrap_create_orchestrator(
        settings=settings,
        log_sink=lambda line: print(line, flush=True),
        sleeper=sleeper,
    )

    previous_handlers = main_install_signal_handlers(sleeper)
    try:
        result = orchestrator.job_run_tests()
    except AtsAdapterError as error:
        logger.debug("ATS orchestration aborted", exc_info=error)
        return EXIT_ERROR
    finally:
        main_restore_signal_handlers(previous_handlers)

    return EXIT_PASSED if result.passed else EXIT_FAILED


def main_install_signal_handlers(sleeper: CancellableSleeper) -> dict[int, object]:
    """Cancel the sleeper on SIGINT and SIGTERM so the poll loop unwinds promptly.

    Args:
        sleeper: Sleeper cancelled when a signal arrives.

    Returns:
        dict[int, object]: Handlers that were active before, keyed by signal number.
    """

    def _handle_signal(signal_number: int, _frame: object) -> None:
        logger.warning("ATS: received signal %d, cancelling", signal_number)
        sleeper.sleeper_cancel()

    previous_handlers: dict[int, object] = {}
    for signal_number in _CANCEL_SIGNALS:
        previous_handlers[signal_number] = signal.getsignal(signal_number)
        signal.signal(signal_number, _handle_signal)
    return previous_handlers


def main_restore_signal_handlers(previous_handlers: dict[int, object]) -> None:
    """Reinstate handlers returned by `main_install_signal_handlers`."""

    for signal_number, previous_handler in previous_handlers.items():
        # getsignal reports None for handlers not installed from Python
        signal.signal(signal_number, signal.SIG_DFL if previous_handler is None else previous_handler)


if __name__ == "__main__":
    raise SystemExit(main())
