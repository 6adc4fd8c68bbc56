from __future__ import annotations
"""Command line access to an S3 file sink."""
import argparse
import asyncio
import hashlib
import json
import logging
import sys
from dataclasses import replace

from botocore.exceptions import BotoCoreError, ClientError

from .errors import FileSinkError
from .profiles import ConnectionProfile, ProfileStorage
from .services import S3FileSink
from .settings import SettingsStorage

LOGGER = logging.getLogger("s3_file_sink")

# shake_* digests need an explicit length, so they are left out.
HASH_ALGORITHMS = sorted(name for name in hashlib.algorithms_guaranteed if not name.startswith("shake_"))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="s3_file_sink", description="Command line access to an S3 file sink.")
    parser.add_argument("--settings", help="settings file (default: ~/.s3_file_sink_settings.json)")
    parser.add_argument("--profiles", help="profiles file (default: ~/.s3_file_sink_profiles.json)")
    parser.add_argument("--bucket", help="bucket name, overrides the settings file")
    parser.add_argument("--prefix", help="root prefix inside the bucket")
    parser.add_argument("--profile", help="connection profile name")
    parser.add_argument("-v", "--verbose", action="store_true", help="log backend requests")
    commands = parser.add_subparsers(dest="command", required=True)

    info = commands.add_parser("info", help="print the node for a path as JSON")
    info.add_argument("path", nargs="?", default="")

    ls = commands.add_parser("ls", help="list the children of a directory")
    ls.add_argument("path", nargs="?", default="")

    find = commands.add_parser("find", help="print relative paths below a path")
    find.add_argument("path", nargs="?", default="")
    find.add_argument("--name", help="regular expression matched against names")
    find.add_argument("--path-pattern", help="regular expression matched against relative paths")
    kind = find.add_mutually_exclusive_group()
    kind.add_argument("--files-only", action="store_true")
    kind.add_argument("--dirs-only", action="store_true")

    cat = commands.add_parser("cat", help="write an object's contents to stdout")
    cat.add_argument("path")

    put = commands.add_parser("put", help="upload a local file")
    put.add_argument("source")
    put.add_argument("path")

    mkdir = commands.add_parser("mkdir", help="create a directory marker")
    mkdir.add_argument("path")

    rm = commands.add_parser("rm", help="delete a path")
    rm.add_argument("path")
    rm.add_argument("--no-recursive", action="store_true", help="only delete the exact key")

    digest = commands.add_parser("hash", help="print a digest of an object")
    digest.add_argument("path")
    digest.add_argument("--algorithm", default="sha512", choices=HASH_ALGORITHMS)

    configure = commands.add_parser("configure", help="save the global options and these values as settings")
    configure.add_argument("--endpoint-url")
    configure.add_argument("--region")
    configure.add_argument("--access-url-domain")
    configure.add_argument("--page-size", type=int)
    configure.add_argument("--delete-batch-size", type=int)

    add_profile = commands.add_parser("add-profile", help="save a connection profile, secret in the keychain")
    add_profile.add_argument("name")
    add_profile.add_argument("--endpoint-url", default="")
    add_profile.add_argument("--access-key", default="")
    add_profile.add_argument("--secret-key", default="")
    add_profile.add_argument("--region", default="")
    return parser


def save_settings(args: argparse.Namespace) -> None:
    storage = SettingsStorage(args.settings)
    updates = {
        "bucket": args.bucket,
        "prefix": args.prefix,
        "profile": args.profile,
        "endpoint_url": args.endpoint_url,
        "region_name": args.region,
        "access_url_domain": args.access_url_domain,
        "page_size": args.page_size,
        "delete_batch_size": args.delete_batch_size,
    }
    settings = replace(storage.load(), **{name: value for name, value in updates.items() if value is not None})
    storage.save(settings)


def save_profile(args: argparse.Namespace) -> None:
    storage = ProfileStorage(args.profiles)
    profiles = [profile for profile in storage.load() if profile.name != args.name]
    profiles.append(
        ConnectionProfile(
            name=args.name,
            endpoint_url=args.endpoint_url,
            access_key=args.access_key,
            secret_key=args.secret_key,
            region_name=args.region,
        )
    )
    storage.save(profiles)


def create_sink(args: argparse.Namespace) -> S3FileSink:
    settings = SettingsStorage(args.settings).load()
    if args.bucket:
        settings = replace(settings, bucket=args.bucket)
    if args.prefix is not None:
        settings = replace(settings, prefix=args.prefix)
    profile_name = args.profile or settings.profile
    profile = ProfileStorage(args.profiles).get(profile_name) if profile_name else None
    if not settings.bucket:
        raise SystemExit("No bucket configured; pass --bucket or set it in the settings file")
    return S3FileSink.from_settings(settings, profile)


async def run_command(sink: S3FileSink, args: argparse.Namespace) -> None:
    out = sys.stdout
    if args.command == "info":
        node = await sink.get_full_file_info(args.path)
        out.write(json.dumps(node.to_dict(), indent=2) + "\n")
    elif args.command == "ls":
        node = await sink.get_full_file_info(args.path)
        for child in node.children if node.children is not None else [node]:
            suffix = "/" if child.directory else ""
            out.write(f"{child.stat.size:>12}  {child.rel_path}{suffix}\n")
    elif args.command == "find":
        async for node in sink.find(
            file=not args.dirs_only,
            directory=not args.files_only,
            name_pattern=args.name,
            path_pattern=args.path_pattern,
            starting_path=args.path,
        ):
            out.write(node.rel_path + "\n")
    elif args.command == "cat":
        async for chunk in sink.read_stream(args.path):
            sys.stdout.buffer.write(chunk)
        sys.stdout.buffer.flush()
    elif args.command == "put":
        with open(args.source, "rb") as handle:
            data = handle.read()
        await sink.write(args.path, data)
    elif args.command == "mkdir":
        await sink.mkdir(args.path)
    elif args.command == "rm":
        results = await sink.rm(args.path, recursive=not args.no_recursive)
        deleted = sum(len(result.get("Deleted") or []) for result in results)
        out.write(f"deleted {deleted} objects\n")
    elif args.command == "hash":
        out.write(await sink.create_hash(args.path, args.algorithm) + "\n")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "configure":
        save_settings(args)
        return 0
    if args.command == "add-profile":
        save_profile(args)
        return 0
    try:
        sink = create_sink(args)
    except KeyError as exc:
        sys.stderr.write(f"error: {exc.args[0]}\n")
        return 1
    try:
        asyncio.run(run_command(sink, args))
    except (FileSinkError, ClientError, BotoCoreError) as exc:
        LOGGER.debug("Command %s failed", args.command, exc_info=True)
        sys.stderr.write(f"error: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
