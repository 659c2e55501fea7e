"""CLI client for a running file index service."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Any
from urllib.parse import urlparse

import httpx

DEFAULT_SERVER = "http://localhost:3002"


def validate_server_url(server_url: str) -> str:
    """Normalize and validate the server URL."""
    parsed = urlparse(server_url.strip())
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"Invalid server URL: {server_url!r}")
    return server_url.strip().rstrip("/")


class IndexClient:
    """Thin HTTP client over the file index API."""

    def __init__(self, server_url: str, timeout: float = 300.0) -> None:
        self.server_url = server_url
        self.client = httpx.Client(base_url=server_url, timeout=timeout)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> IndexClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        resp = self.client.get(path, params=params)
        resp.raise_for_status()
        result: dict[str, Any] = resp.json()
        return result

    def rebuild(self) -> dict[str, Any]:
        resp = self.client.post("/api/rebuild")
        resp.raise_for_status()
        result: dict[str, Any] = resp.json()
        return result

    def search(
        self,
        term: str | None = None,
        file_type: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if term:
            params["q"] = term
        if file_type:
            params["type"] = file_type
        return self._get("/api/search", params)

    def stats(self) -> dict[str, Any]:
        return self._get("/api/stats")


def _print_search(result: dict[str, Any]) -> None:
    files = result.get("files", [])
    for f in files:
        marker = "d" if f["is_directory"] else "-"
        size = f["size_formatted"]
        print(f"{marker} {size:>12}  {f['modified_at_formatted']}  {f['relative_path']}")
    shown_from = result["offset"] + 1 if files else 0
    print(f"Showing {shown_from}-{result['offset'] + len(files)} of {result['total']}")


def _print_stats(result: dict[str, Any]) -> None:
    print("Index Statistics:")
    print(f"  Files:       {result['total_files']}")
    print(f"  Directories: {result['total_directories']}")
    print(f"  Total size:  {result['total_size_formatted']}")
    for item in result.get("file_types", []):
        print(f"    {item['type_label']:<12} {item['count']}")


def main() -> None:
    """Entry point for the file index CLI client."""
    parser = argparse.ArgumentParser(description="File index service client")
    parser.add_argument(
        "--server",
        "-s",
        default=os.environ.get("FILE_INDEXER_SERVER", DEFAULT_SERVER),
        help=f"Server URL (default: {DEFAULT_SERVER})",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("rebuild", help="Rescan the root directory and rebuild the index")
    search_parser = subparsers.add_parser("search", help="Search indexed files")
    search_parser.add_argument("term", nargs="?", default=None, help="Name or path substring")
    search_parser.add_argument("--type", "-t", dest="file_type", help="Exact type label")
    search_parser.add_argument("--limit", "-n", type=int, default=100)
    search_parser.add_argument("--offset", type=int, default=0)
    subparsers.add_parser("stats", help="Show index statistics")

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        return

    try:
        server_url = validate_server_url(args.server)
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    with IndexClient(server_url) as client:
        try:
            if args.command == "rebuild":
                result = client.rebuild()
                print(f"Indexed {result['count']} entries in {result['duration_ms']}ms")
            elif args.command == "search":
                _print_search(
                    client.search(args.term, args.file_type, args.limit, args.offset)
                )
            elif args.command == "stats":
                _print_stats(client.stats())
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text
            print(f"Error: server returned {exc.response.status_code}: {detail}")
            sys.exit(1)
        except httpx.HTTPError as exc:
            print(f"Error: cannot reach {server_url}: {exc}")
            sys.exit(1)


if __name__ == "__main__":
    main()
