"""Command-line interface for the Qencode client.

WHY: Operators need to fetch tokens, create tasks, and kick off encodes
from a terminal or a shell script without writing Python. The CLI wires
the QencodeClient operations to subcommands and prints the typed
responses as JSON.

HOW: argparse with one subcommand per API call plus ``encode``, which
chains token → create task → start task. The async core runs via
asyncio.run(). Responses go to stdout as JSON; status and errors go to
stderr.

RULES:
- Subcommands: token, create-task, start-task, encode
- API key comes from --api-key or QENCODE_API_KEY (see config)
- Query files hold the {"query": {...}} document and are sent as-is
- Exit 1 on any error, 2 when Qencode returns a non-zero "error" code
- Status output goes to stderr (not stdout)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from qencode_client.api.client import QencodeClient, QencodeError, RequestError
from qencode_client.config import load_api_key


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the JSON can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _load_query(path: str) -> dict[str, Any]:
    """Load an encoding query document from a JSON file.

    RULES:
    - The file must contain a JSON object with a "query" key
    - The document is returned unchanged (unknown fields are kept)
    - Raises ValueError for invalid documents, OSError for unreadable files
    """
    text = Path(path).read_text(encoding="utf-8")
    doc = json.loads(text)
    if not isinstance(doc, dict) or "query" not in doc:
        raise ValueError('{}: expected a JSON object with a "query" key'.format(path))
    return doc


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _cmd_token(client: QencodeClient, args: argparse.Namespace) -> Any:
    api_key = args.api_key or load_api_key()
    _status("Requesting access token...")
    return await client.get_token(api_key)


async def _cmd_create_task(client: QencodeClient, args: argparse.Namespace) -> Any:
    _status("Creating task...")
    return await client.create_task(args.token)


async def _cmd_start_task(client: QencodeClient, args: argparse.Namespace) -> Any:
    query = _load_query(args.query_file)
    _status("Starting task...")
    return await client.start_task(args.task_token, args.payload, query)


async def _cmd_encode(client: QencodeClient, args: argparse.Namespace) -> Any:
    """Run the whole flow: token, create task, start task.

    Stops after create-task when Qencode reports a non-zero error code,
    returning that response so the caller sees the code.
    """
    api_key = args.api_key or load_api_key()
    query = _load_query(args.query_file)

    _status("Requesting access token...")
    token = await client.get_token(api_key)

    _status("Creating task...")
    task = await client.create_task(token.token)
    if task.error:
        return task
    _status("  Task token: {}".format(task.task_token))

    _status("Starting task...")
    return await client.start_task(task.task_token, args.payload, query)


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected subcommand and print its result.

    Returns the process exit code.
    """
    try:
        async with QencodeClient(base_url=args.base_url) as client:
            result = await args.handler(client, args)
    except QencodeError as exc:
        _status("Error: {}".format(exc))
        if isinstance(exc, RequestError) and exc.response_body:
            _status("  Response body: {}".format(exc.text))
        return 1
    except (OSError, ValueError) as exc:
        _status("Error: {}".format(exc))
        return 1

    print(json.dumps(result.to_dict(), indent=2))

    error_code = getattr(result, "error", 0)
    if error_code:
        _status("Warning: Qencode returned error code {}".format(error_code))
        return 2
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI.

    RULES:
    - Global: --base-url, --verbose
    - token: --api-key
    - create-task: --token (required)
    - start-task: --task-token, --query-file (required), --payload
    - encode: --query-file (required), --api-key, --payload
    """
    parser = argparse.ArgumentParser(
        prog="qencode_client",
        description="Obtain Qencode access tokens, create tasks and start encodes.",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Qencode API base URL (default: QENCODE_BASE_URL or https://api.qencode.com).",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log HTTP requests to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    token = subparsers.add_parser("token", help="Exchange an API key for an access token.")
    token.add_argument("--api-key", default=None, help="API key (default: QENCODE_API_KEY).")
    token.set_defaults(handler=_cmd_token)

    create = subparsers.add_parser("create-task", help="Create an encoding task.")
    create.add_argument("--token", required=True, help="Access token from the token command.")
    create.set_defaults(handler=_cmd_create_task)

    start = subparsers.add_parser("start-task", help="Start an encoding task.")
    start.add_argument("--task-token", required=True, help="Task token from create-task.")
    start.add_argument(
        "--query-file",
        required=True,
        help='Path to a JSON file holding the {"query": {...}} document.',
    )
    start.add_argument(
        "--payload",
        default="",
        help="Opaque string echoed back on the task callback.",
    )
    start.set_defaults(handler=_cmd_start_task)

    encode = subparsers.add_parser(
        "encode",
        help="Get a token, create a task and start it in one go.",
    )
    encode.add_argument(
        "--query-file",
        required=True,
        help='Path to a JSON file holding the {"query": {...}} document.',
    )
    encode.add_argument("--api-key", default=None, help="API key (default: QENCODE_API_KEY).")
    encode.add_argument(
        "--payload",
        default="",
        help="Opaque string echoed back on the task callback.",
    )
    encode.set_defaults(handler=_cmd_encode)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    - Exits with a non-zero status on failure
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    code = asyncio.run(_run(args))
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
