from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from sharepoint_connector.client import SharePointDataClient
from sharepoint_connector.configuration import SharePointContextConfiguration
from sharepoint_connector.exceptions import SharePointError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sharepoint-connector",
        description=(
            "Run file and folder commands against a SharePoint site and emit "
            "JSON to stdout. Connection settings are read from sp_* environment "
            "variables or a .env file."
        ),
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Path to a .env file with the sp_* settings.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log requests to stderr.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    delete = commands.add_parser("delete", help="Delete a folder.")
    delete.add_argument("path", help="Folder path relative to the base path.")

    delete_file = commands.add_parser("delete-file", help="Delete a file.")
    delete_file.add_argument("path", help="Folder path relative to the base path.")
    delete_file.add_argument("name", help="Name of the file to delete.")

    mkdir = commands.add_parser("mkdir", help="Create a folder.")
    mkdir.add_argument("name", help="Name of the folder to create.")
    mkdir.add_argument(
        "--parent",
        default=None,
        help="Parent folder relative to the base path.",
    )

    upload = commands.add_parser("upload", help="Upload a local file.")
    upload.add_argument("path", help="Target folder relative to the base path.")
    upload.add_argument("local_file", type=Path, help="Local file to upload.")
    upload.add_argument(
        "--name",
        default=None,
        help="File name in SharePoint (defaults to the local file name).",
    )

    recycle = commands.add_parser("recycle", help="Move a folder to the recycle bin.")
    recycle.add_argument("path", help="Folder path relative to the base path.")

    restore = commands.add_parser("restore", help="Restore a recycle bin item.")
    restore.add_argument("id", help="Recycle bin item id.")
    return parser


def _run(client: SharePointDataClient, args: argparse.Namespace) -> dict[str, Any]:
    if args.command == "delete":
        return {"deleted": client.delete_resource(args.path)}
    if args.command == "delete-file":
        return {"deleted": client.delete_file(args.path, args.name)}
    if args.command == "mkdir":
        return client.create_folder(args.name, args.parent).to_json()
    if args.command == "upload":
        name = args.name or args.local_file.name
        content = args.local_file.read_bytes()
        return client.upload_file(args.path, name, content).to_json()
    if args.command == "recycle":
        recycle_id = client.recycle_resource(args.path)
        return {"recycle_bin_id": str(recycle_id) if recycle_id else None}
    if args.command == "restore":
        return {"restored": client.restore_recycle_bin_resource(args.id)}
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    try:
        configuration = SharePointContextConfiguration.from_env(
            dotenv_path=args.env_file
        )
        client = SharePointDataClient(configuration)
        payload = _run(client, args)
        json.dump(payload, sys.stdout)
        sys.stdout.write("\n")
        return 0
    except (SharePointError, ValueError, TypeError, OSError) as exc:
        print(f"sharepoint-connector: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
