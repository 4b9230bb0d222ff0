#!/usr/bin/env python3
"""SurfSight Device Ops CLI.

This module provides a command-line interface for the SurfSight batch device
operations. It can serve the HTTP API for the browser UI, or run one batch
directly from the terminal using the same use case the API uses.

Architecture:
    - SurfsightClient is the shared HTTP layer for all upstream calls
    - SessionStore performs the authenticate exchange and holds the token
    - BatchOperationsUseCase runs the batch through SurfsightDeviceGateway

Environment Variables:
    - SURFSIGHT_BASE_URL: SurfSight API base URL (optional)
    - SURFSIGHT_TIMEOUT_SECONDS: Per-request timeout (optional, default 30)
    - SURFSIGHT_PASSWORD: Account password for `run` (prompted if unset)
    - PORT: Port for `serve` (default 3000)

Example Usage:
    $ python main.py serve                                   # Start the API on :3000
    $ python main.py run validate --email ops@example.com --imeis "357660101000198, 357660101000206"
    $ python main.py run billing --email ops@example.com --file imeis.txt --status suspended
    $ python main.py run quality --email ops@example.com --imeis 357660101000198 --level 3 --json
"""
import argparse
import asyncio
import getpass
import json
import logging
import os
import sys
from datetime import datetime

from dotenv import load_dotenv

load_dotenv()

# Local imports
from src.surfsight.api import (
    DeviceManager,
    NetworkError,
    SessionStore,
    SurfsightClient,
    SurfsightError,
    sanitize_error_message,
)
from src.surfsight.batch.adapters import SurfsightDeviceGateway
from src.surfsight.batch.domain import (
    BatchResult,
    BillingStatus,
    OperationKind,
    OperationRequest,
    parse_identifiers,
)
from src.surfsight.batch.use_cases import BatchOperationsUseCase


def read_identifiers(args: argparse.Namespace) -> list[str]:
    """Collect IMEIs from --imeis text or --file (commas or whitespace)."""
    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            return parse_identifiers(f.read())
    return parse_identifiers(args.imeis or "")


def build_request(args: argparse.Namespace, identifiers: list[str]) -> OperationRequest:
    """Map CLI arguments to an OperationRequest.

    --level is the user-facing level (1-5); the upstream profile id is one higher.
    """
    kind = OperationKind(args.operation)
    parameter = None
    if kind == OperationKind.BILLING:
        parameter = BillingStatus(args.status)
    elif kind == OperationKind.QUALITY:
        parameter = args.level + 1
    return OperationRequest(kind=kind, identifiers=identifiers, parameter=parameter)


def print_result(result: BatchResult) -> None:
    """Print a result table followed by the summary."""
    print(f"\n{'IMEI':<20} {'Outcome':<10} {'HTTP':<6} {'Detail':<40}")
    print("-" * 80)

    for record in result.records:
        status = str(record.http_status) if record.http_status else "-"
        print(
            f"{record.identifier:<20} {record.tag.value:<10} {status:<6} "
            f"{record.primary_detail[:40]:<40}"
        )

    print("\n" + "-" * 80)
    print(
        f"{result.kind.value.upper()}: {len(result.records)} device(s), "
        f"{result.succeeded} succeeded, {result.not_found} not found, "
        f"{result.failed} failed ({result.total_duration_seconds:.1f}s)"
    )


async def run_batch(args: argparse.Namespace) -> int:
    """Log in, run one batch and print the outcome.

    Returns:
        Process exit status
    """
    try:
        identifiers = read_identifiers(args)
    except OSError as e:
        print(f"[Main] Could not read {args.file}: {e}")
        return 1

    if not identifiers:
        print("[Main] No IMEIs given. Use --imeis or --file.")
        return 1

    password = os.getenv("SURFSIGHT_PASSWORD") or getpass.getpass("SurfSight password: ")

    start_time = datetime.now()
    print(f"[Main] Starting {args.operation} for {len(identifiers)} device(s) at {start_time.isoformat()}")

    try:
        client = SurfsightClient()
        device_manager = DeviceManager(client)
        store = SessionStore(device_manager)

        session_id, session = await store.login(args.email, password)
        print(f"[Main] Logged in as {session.account_email} (org {session.organization_id})")

        use_case = BatchOperationsUseCase(SurfsightDeviceGateway(device_manager))
        try:
            result = await use_case.execute(session, build_request(args, identifiers))
        finally:
            store.logout(session_id)

    except SurfsightError as e:
        if isinstance(e, NetworkError):
            print(f"[Main] Error contacting SurfSight: {sanitize_error_message(e.message)}")
        else:
            print(f"[Main] {e.code}: {sanitize_error_message(e.message)}")
        if args.json:
            print(json.dumps(e.to_dict(), indent=2))
        return 1

    print_result(result)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))

    return 0


def serve(args: argparse.Namespace) -> int:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "src.surfsight.batch.app:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Batch operations on SurfSight devices by IMEI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py serve --port 3000
  python main.py run validate --email ops@example.com --imeis "357660101000198 357660101000206"
  python main.py run billing --email ops@example.com --file imeis.txt --status deactivated
  python main.py run quality --email ops@example.com --file imeis.txt --level 2
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "3000")),
        help="Port to listen on (default: $PORT or 3000)"
    )
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # run
    run_parser = subparsers.add_parser("run", help="Run one batch from the terminal")
    run_parser.add_argument(
        "operation",
        choices=[kind.value for kind in OperationKind],
        help="Batch operation to run"
    )
    run_parser.add_argument("--email", required=True, help="SurfSight account email")

    input_group = run_parser.add_argument_group("Input")
    source = input_group.add_mutually_exclusive_group(required=True)
    source.add_argument("--imeis", type=str, metavar="TEXT", help="IMEIs separated by commas or whitespace")
    source.add_argument("--file", type=str, metavar="PATH", help="File of IMEIs separated by commas or whitespace")

    params_group = run_parser.add_argument_group("Operation Parameters")
    params_group.add_argument(
        "--status",
        choices=[status.value for status in BillingStatus],
        help="Billing status to apply (billing)"
    )
    params_group.add_argument(
        "--level",
        type=int,
        choices=range(1, 6),
        metavar="{1..5}",
        help="Data-quality level to apply (quality)"
    )

    run_parser.add_argument("--json", action="store_true", help="Also print the JSON result")

    args = parser.parse_args()

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "serve":
        sys.exit(serve(args))

    if args.operation == OperationKind.BILLING.value and not args.status:
        parser.error("billing requires --status")
    if args.operation == OperationKind.QUALITY.value and args.level is None:
        parser.error("quality requires --level")

    sys.exit(asyncio.run(run_batch(args)))


if __name__ == "__main__":
    main()
