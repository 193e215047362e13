#!/usr/bin/env python3
"""
Package Hash Store - Main entry point

Usage:
    package_hash_store serve <port> --packages-dir=<DIR> [--host=<HOST>] [--base-url=<URL>]
    package_hash_store hash <package_id> <version> <nupkg_file> --packages-dir=<DIR>
    package_hash_store verify <package_id> <version> --packages-dir=<DIR>
    package_hash_store paths <package_id> <version> --packages-dir=<DIR>

Common options:
    [--hash-algorithm=SHA256|SHA512] [--no-lowercase] [--log-level=<LEVEL>]
"""

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from domain.crypto_hash_provider import CryptoHashProvider
from domain.version_folder_path_resolver import VersionFolderPathResolver
from infrastructure.file_system_package_repository import FileSystemPackageRepository
from interfaces.api import initialize_app

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Package Hash Store - local package folder with hash sidecar files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    parser.add_argument('--packages-dir', required=True, help='Root of the packages folder')
    parser.add_argument('--hash-algorithm', default=None,
                        help='Hash algorithm: SHA256 or SHA512 (default: SHA512)')
    parser.add_argument('--no-lowercase', action='store_true',
                        help='Keep package id and version case in paths')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO)')

    subparsers = parser.add_subparsers(dest='command', required=True)

    serve = subparsers.add_parser('serve', help='Run the HTTP server')
    serve.add_argument('port', type=int, help='Port to listen on')
    serve.add_argument('--host', default='0.0.0.0',
                       help='Host to bind to (default: 0.0.0.0)')
    serve.add_argument('--base-url', default='http://localhost:8000',
                       help='Base URL for download links (default: http://localhost:8000)')

    hash_cmd = subparsers.add_parser('hash', help='Store a package file and write its hash file')
    hash_cmd.add_argument('package_id')
    hash_cmd.add_argument('version')
    hash_cmd.add_argument('nupkg_file', help='Path of the package archive to store')

    verify = subparsers.add_parser('verify', help='Check a stored package against its hash file')
    verify.add_argument('package_id')
    verify.add_argument('version')

    paths = subparsers.add_parser('paths', help='Print the resolved paths of a package')
    paths.add_argument('package_id')
    paths.add_argument('version')

    return parser


def run_serve(args) -> int:
    base_url = args.base_url
    if base_url == 'http://localhost:8000' and args.port != 8000:
        base_url = f'http://localhost:{args.port}'

    app = initialize_app(
        packages_dir=args.packages_dir,
        hash_algorithm=args.hash_algorithm,
        lowercase=not args.no_lowercase,
        base_url=base_url
    )

    logger.info("Starting Package Hash Store on %s:%s", args.host, args.port)
    logger.info("Packages directory: %s", args.packages_dir)

    uvicorn.run(app, host=args.host, port=args.port)
    return 0


def _repository(args) -> FileSystemPackageRepository:
    return FileSystemPackageRepository(
        Path(args.packages_dir),
        hash_provider=CryptoHashProvider(args.hash_algorithm),
        lowercase=not args.no_lowercase
    )


def run_hash(args) -> int:
    repository = _repository(args)
    with open(args.nupkg_file, 'rb') as f:
        encoded_hash = repository.save_package(args.package_id, args.version, f)

    print(repository.path_resolver.get_hash_path(args.package_id, args.version))
    print(encoded_hash)
    return 0


def run_verify(args) -> int:
    repository = _repository(args)
    if not repository.has_package(args.package_id, args.version):
        print(f"Package not found: {args.package_id} {args.version}", file=sys.stderr)
        return 2

    valid = repository.verify_package(args.package_id, args.version)
    print("valid" if valid else "invalid")
    return 0 if valid else 1


def run_paths(args) -> int:
    resolver = VersionFolderPathResolver(args.packages_dir, lowercase=not args.no_lowercase)
    package_id, version = args.package_id, args.version

    print(f"install_path: {resolver.get_install_path(package_id, version)}")
    print(f"package_file: {resolver.get_package_file_path(package_id, version)}")
    print(f"manifest_file: {resolver.get_manifest_file_path(package_id, version)}")
    print(f"hash_file: {resolver.get_hash_path(package_id, version)}")
    print(f"download_marker: {resolver.get_package_download_marker_path(package_id)}")
    return 0


COMMANDS = {
    'serve': run_serve,
    'hash': run_hash,
    'verify': run_verify,
    'paths': run_paths,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        return COMMANDS[args.command](args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
