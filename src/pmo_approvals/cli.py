#!/usr/bin/env python3
"""
CLI tool for reviewing change requests.

Usage:
    python -m pmo_approvals.cli --user 3 pending
    python -m pmo_approvals.cli --user 3 show 12
    python -m pmo_approvals.cli --user 3 approve 12
    python -m pmo_approvals.cli --user 2 reject 12 --reason "Missing cost breakdown" --return-to SubPMO
    python -m pmo_approvals.cli --user 5 resubmit 12 --details "Revised scope"
    python -m pmo_approvals.cli --user 5 comments change-requests 12
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

import httpx
from colorama import Fore, Style, init as colorama_init

colorama_init()

# Mutations are retried once on a transport failure.
MUTATION_RETRIES = 1

STATUS_COLORS = {
    "Pending": Fore.YELLOW,
    "PendingMainPMO": Fore.MAGENTA,
    "Approved": Fore.GREEN,
    "Rejected": Fore.RED,
    "ReturnedToProjectManager": Fore.CYAN,
    "ReturnedToSubPMO": Fore.CYAN,
}


def colorize(text: str, color: str) -> str:
    return f"{color}{text}{Style.RESET_ALL}"


def format_status(status: str) -> str:
    return colorize(status, STATUS_COLORS.get(status, Fore.BLUE))


def print_json(data: Any, indent: int = 2) -> None:
    print(json.dumps(data, indent=indent, default=str, ensure_ascii=False))


def print_request(cr: dict) -> None:
    """Pretty print a change request."""
    request_id = colorize(f"#{cr['id']}", Style.BRIGHT)
    print(f"\n{request_id} {cr['type']} on project {cr['projectId']}  {format_status(cr['status'])}")
    print(f"  {colorize('Details:', Fore.CYAN)} {cr.get('details', '')}")
    if cr.get("detailsAr"):
        print(f"  {colorize('Details (ar):', Fore.CYAN)} {cr['detailsAr']}")
    print(f"  {colorize('Requested by:', Fore.CYAN)} user {cr['requestedByUserId']}")
    if cr.get("reviewedByUserId") is not None:
        print(f"  {colorize('Reviewed by:', Fore.CYAN)} user {cr['reviewedByUserId']} at {cr.get('reviewedAt')}")
    if cr.get("rejectionReason"):
        print(f"  {colorize('Reason:', Fore.RED)} {cr['rejectionReason']}")


def _print_error(response: httpx.Response) -> int:
    try:
        message = response.json().get("message", response.text)
    except ValueError:
        message = response.text
    print(colorize(f"Error {response.status_code}: {message}", Fore.RED), file=sys.stderr)
    return 1


async def _send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    retries: int = 0,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request, retrying transport failures up to `retries` times."""
    attempt = 0
    while True:
        try:
            return await client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            if attempt >= retries:
                raise
            attempt += 1
            print(colorize(f"Transport error ({e}); retrying...", Style.DIM), file=sys.stderr)


async def cmd_pending(args) -> int:
    """List change requests awaiting review."""
    async with httpx.AsyncClient(base_url=args.base_url, headers=_get_headers(args)) as client:
        response = await _send(client, "GET", "/api/change-requests/pending")
        if response.status_code != 200:
            return _print_error(response)
        data = response.json()

    if args.json:
        print_json(data)
        return 0

    print(colorize(f"\nAwaiting review: {len(data)}", Style.BRIGHT))
    for cr in data:
        print_request(cr)
    if not data:
        print(colorize("  (none)", Style.DIM))
    return 0


async def cmd_show(args) -> int:
    """Show a change request and its comment thread."""
    async with httpx.AsyncClient(base_url=args.base_url, headers=_get_headers(args)) as client:
        response = await _send(client, "GET", f"/api/change-requests/{args.id}")
        if response.status_code != 200:
            return _print_error(response)
        cr = response.json()

        comments = await _send(client, "GET", f"/api/change-requests/{args.id}/comments")
        thread = comments.json() if comments.status_code == 200 else []

    if args.json:
        print_json({"changeRequest": cr, "comments": thread})
        return 0

    print_request(cr)
    _print_comments(thread)
    return 0


async def _update(args, body: dict) -> int:
    async with httpx.AsyncClient(base_url=args.base_url, headers=_get_headers(args)) as client:
        response = await _send(
            client, "PUT", f"/api/change-requests/{args.id}",
            retries=MUTATION_RETRIES,
            json=body,
        )
        if response.status_code != 200:
            return _print_error(response)
        cr = response.json()

    if args.json:
        print_json(cr)
    else:
        print_request(cr)
    return 0


async def cmd_approve(args) -> int:
    """Approve (Sub PMO approvals escalate to Main PMO)."""
    body: dict[str, Any] = {"status": "Approved"}
    if args.new_status:
        body["newStatus"] = args.new_status
    if args.new_budget is not None:
        body["newBudget"] = args.new_budget
    return await _update(args, body)


async def cmd_reject(args) -> int:
    """Reject, optionally routing back for revision."""
    body: dict[str, Any] = {"status": "Rejected", "rejectionReason": args.reason}
    if args.return_to:
        body["returnTo"] = args.return_to
    return await _update(args, body)


async def cmd_resubmit(args) -> int:
    """Resubmit a returned change request."""
    body: dict[str, Any] = {"status": "Pending"}
    if args.details:
        body["details"] = args.details
    return await _update(args, body)


async def cmd_comments(args) -> int:
    """Show a comment thread."""
    async with httpx.AsyncClient(base_url=args.base_url, headers=_get_headers(args)) as client:
        response = await _send(client, "GET", f"/api/{args.entity}/{args.id}/comments")
        if response.status_code != 200:
            return _print_error(response)
        thread = response.json()

    if args.json:
        print_json(thread)
    else:
        _print_comments(thread)
    return 0


def _print_comments(thread: list[dict]) -> None:
    print(colorize("\nComments:", Style.BRIGHT))
    for c in thread:
        author = "system" if c.get("system") else f"user {c.get('authorUserId')}"
        print(f"  {colorize(c['createdAt'], Style.DIM)} {colorize(author, Fore.CYAN)}: {c['content']}")
    if not thread:
        print(colorize("  (none)", Style.DIM))


def _get_headers(args) -> dict:
    """Build request headers."""
    headers = {}
    if args.user is not None:
        headers["X-User-ID"] = str(args.user)
    return headers


COMMANDS = {
    "pending": cmd_pending,
    "show": cmd_show,
    "approve": cmd_approve,
    "reject": cmd_reject,
    "resubmit": cmd_resubmit,
    "comments": cmd_comments,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="CLI tool for the PMO approvals service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--base-url",
        default="http://localhost:8060",
        help="Base URL of the approvals service",
    )
    parser.add_argument("--user", type=int, help="Acting user ID (sent as X-User-ID)")
    parser.add_argument("--json", action="store_true", help="Print raw JSON")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("pending", help="List change requests awaiting your review")

    show_parser = subparsers.add_parser("show", help="Show a change request")
    show_parser.add_argument("id", type=int)

    approve_parser = subparsers.add_parser("approve", help="Approve a change request")
    approve_parser.add_argument("id", type=int)
    approve_parser.add_argument("--new-status", help="Project status to apply (Status requests)")
    approve_parser.add_argument("--new-budget", type=float, help="Project budget to apply (Budget requests)")

    reject_parser = subparsers.add_parser("reject", help="Reject a change request")
    reject_parser.add_argument("id", type=int)
    reject_parser.add_argument("--reason", required=True, help="Rejection reason")
    reject_parser.add_argument(
        "--return-to",
        choices=["ProjectManager", "SubPMO"],
        help="Route back for revision (omit for a final rejection)",
    )

    resubmit_parser = subparsers.add_parser("resubmit", help="Resubmit a returned change request")
    resubmit_parser.add_argument("id", type=int)
    resubmit_parser.add_argument("--details", help="Revised details")

    comments_parser = subparsers.add_parser("comments", help="Show a comment thread")
    comments_parser.add_argument("entity", choices=["tasks", "assignments", "change-requests"])
    comments_parser.add_argument("id", type=int)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        return asyncio.run(command(args))
    except httpx.TransportError as e:
        print(colorize(f"Dependency failure, service unreachable: {e}", Fore.RED), file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main() or 0)
