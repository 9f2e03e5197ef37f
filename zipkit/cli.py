from __future__ import annotations

import sys
import argparse
import logging
import getpass as _getpass

from typing import List, Optional

from zipkit.archive import Archive
from zipkit.encryption import ENCRYPTION_METHODS
from zipkit.errors import ZipkitError


def _kind(obj) -> str:
    if obj.get("encrypted"):
        return "E"
    return "-"


def cmd_zip(
    output: str,
    inputs: List[str],
    *,
    password: Optional[str] = None,
    encryption: str = "aes256",
    store: bool = False,
    overwrite: bool = False,
    quiet: bool = False,
) -> bool:
    """Create a ZIP archive from files and directories.

    Args:
        output: Path of the archive to write.
        inputs: Files or directories to add, in order.
        password: Encrypt every added file with this password.
        encryption: Encryption method used with ``password``.
        store: Store files without compression.
        overwrite: Replace ``output`` if it exists.
        quiet: Only print the summary.
    """
    archive = Archive().create(output, overwrite=overwrite)
    for item in inputs:
        if not quiet:
            print(f"  adding: {item}")
        archive.add(item, password=password, encryption=encryption, compress=not store)
    total = archive.count()
    ok = archive.save()
    if ok:
        print(f"Wrote {total} file(s) to {output}")
    else:
        print(f"Error: failed to write {output}", file=sys.stderr)
    return ok


def cmd_unzip(
    archive: str,
    *,
    outdir: str = ".",
    password: Optional[str] = None,
    files: Optional[List[str]] = None,
) -> bool:
    """Extract an archive, or the named entries, into ``outdir``."""
    ok = Archive.unzip(archive, outdir, password=password, files=files or None)
    if ok:
        print(f"Extracted {archive} to {outdir}")
    else:
        print(
            f"Error: could not extract {archive}. If it is encrypted, check --password.",
            file=sys.stderr,
        )
    return ok


def cmd_list(archive: str, *, prefix: Optional[str] = None) -> bool:
    """Print one line per file: encrypted flag, size, compressed size, name."""
    arc = Archive().open(archive)
    for obj in arc.list(prefix):
        print(f"{_kind(obj)}\t{obj.size}\t{obj.compressed_size}\t{obj.name}")
    arc.save()
    return True


def cmd_encrypt(archive: str, *, password: str, method: str = "aes256") -> bool:
    """Encrypt all not yet encrypted files of an existing archive."""
    arc = Archive().open(archive)
    before = sum(1 for obj in arc.list() if obj.get("encrypted"))
    arc.encrypt(password, method)
    after = sum(1 for obj in arc.list() if obj.get("encrypted"))
    ok = arc.save()
    if ok:
        print(f"Encrypted {after - before} file(s) with {method}")
    return ok


def cmd_delete(archive: str, names: List[str]) -> bool:
    """Delete entries by exact name."""
    arc = Archive().open(archive)
    for name in names:
        arc.delete(name)
        print(f"  deleting: {name}")
    return arc.save()


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="zipkit", description="Create, inspect and extract ZIP archives")
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_zip = sub.add_parser("zip", help="Create an archive from files and directories")
    ap_zip.add_argument("output", help="Archive path")
    ap_zip.add_argument("inputs", nargs="+", help="Input files/directories")
    ap_zip.add_argument("--password", help="Encrypt files with this password")
    ap_zip.add_argument(
        "--encryption",
        choices=list(ENCRYPTION_METHODS),
        default="aes256",
        help="Encryption method used with --password (default: aes256)",
    )
    ap_zip.add_argument("--store", action="store_true", help="Store files without compression")
    ap_zip.add_argument("--overwrite", action="store_true", help="Replace an existing archive")
    ap_zip.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_unzip = sub.add_parser("unzip", help="Extract an archive")
    ap_unzip.add_argument("archive", help="Archive path")
    ap_unzip.add_argument("--outdir", default=".", help="Output directory")
    ap_unzip.add_argument("--password", help="Archive password")
    ap_unzip.add_argument("files", nargs="*", help="Specific entry names to extract")

    ap_list = sub.add_parser("list", help="List archive contents")
    ap_list.add_argument("archive", help="Archive path")
    ap_list.add_argument("--prefix", help="Only list files below this folder")

    ap_encrypt = sub.add_parser("encrypt", help="Encrypt all unencrypted files")
    ap_encrypt.add_argument("archive", help="Archive path")
    ap_encrypt.add_argument("--password", help="Password (prompted when omitted)")
    ap_encrypt.add_argument("--encryption", choices=list(ENCRYPTION_METHODS), default="aes256")

    ap_delete = sub.add_parser("delete", help="Delete entries")
    ap_delete.add_argument("archive", help="Archive path")
    ap_delete.add_argument("names", nargs="+", help="Exact entry names (directories end with /)")

    args, extra = ap.parse_known_args(argv)
    if extra:
        # entry names may follow the unzip options
        if args.cmd != "unzip" or any(e.startswith("-") for e in extra):
            ap.error("unrecognized arguments: " + " ".join(extra))
        args.files.extend(extra)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        if args.cmd == "zip":
            ok = cmd_zip(
                args.output,
                args.inputs,
                password=args.password,
                encryption=args.encryption,
                store=args.store,
                overwrite=args.overwrite,
                quiet=args.quiet,
            )
        elif args.cmd == "unzip":
            ok = cmd_unzip(args.archive, outdir=args.outdir, password=args.password, files=args.files)
        elif args.cmd == "list":
            ok = cmd_list(args.archive, prefix=args.prefix)
        elif args.cmd == "encrypt":
            password = args.password or _getpass.getpass("Password: ")
            ok = cmd_encrypt(args.archive, password=password, method=args.encryption)
        elif args.cmd == "delete":
            ok = cmd_delete(args.archive, args.names)
        else:
            raise RuntimeError("Unknown command")
    except (ZipkitError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
