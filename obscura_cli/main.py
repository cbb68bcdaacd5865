#!/usr/bin/env python3
"""
Obscura Command Line Interface

Encrypt text and files, hash data, hide messages in images and add or read
invisible watermarks.

Usage:
    obscura encrypt [OPTIONS]
    obscura decrypt [OPTIONS]
    obscura encrypt-file [OPTIONS]
    obscura decrypt-file [OPTIONS]
    obscura hash [OPTIONS]
    obscura stego [COMMAND]
    obscura watermark [COMMAND]
    obscura --version
    obscura --help
"""

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Optional

from obscura_core import __version__
from obscura_core.crypto import CryptoPacker, FileMetadata
from obscura_core.errors import ObscuraError, PasswordRequiredError
from obscura_core.stego import ImageStego, PixelBuffer, WatermarkCodec

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PASSWORD_REQUIRED = 2


class ObscuraCLI:
    """Main CLI application for Obscura."""

    def __init__(self, crypto: Optional[CryptoPacker] = None):
        self.crypto = crypto or CryptoPacker()
        self.stego = ImageStego(self.crypto)
        self.watermarks = WatermarkCodec(self.crypto)

    def run(self, args: list) -> int:
        """Run the CLI with given arguments."""
        parser = self.create_parser()
        parsed = parser.parse_args(args)

        logging.basicConfig(
            level=logging.DEBUG if parsed.verbose else logging.WARNING,
            format="%(levelname)s %(name)s: %(message)s",
        )

        if not hasattr(parsed, "func"):
            parser.print_help()
            return EXIT_OK

        try:
            return parsed.func(parsed)
        except PasswordRequiredError as e:
            print(f"Error: {e.message} Re-run with --password.", file=sys.stderr)
            return EXIT_PASSWORD_REQUIRED
        except (ObscuraError, OSError, ValueError) as e:
            message = e.message if isinstance(e, ObscuraError) else str(e)
            print(f"Error: {message}", file=sys.stderr)
            return EXIT_ERROR

    def create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser."""
        parser = argparse.ArgumentParser(
            prog="obscura",
            description="Obscura encryption and steganography CLI",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
    obscura encrypt --text "meet at noon" --password hunter2
    obscura decrypt --packet "<salt>:<iv>:<ciphertext>" --password hunter2
    obscura encrypt-file --input report.pdf --password hunter2
    obscura hash --text hello --algorithm SHA-512
    obscura stego embed --carrier cover.png --message "hi" --output out.png
    obscura watermark add --carrier photo.png --text "(c) ACME" --output marked.png
            """,
        )

        parser.add_argument("--version", action="version", version=f"Obscura v{__version__}")
        parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

        subparsers = parser.add_subparsers(title="commands", dest="command")

        self.add_encrypt_command(subparsers)
        self.add_decrypt_command(subparsers)
        self.add_file_commands(subparsers)
        self.add_hash_command(subparsers)
        self.add_stego_commands(subparsers)
        self.add_watermark_commands(subparsers)

        return parser

    @staticmethod
    def _add_password(cmd):
        cmd.add_argument("--password", "-p", help="Password (prompted if omitted)")

    def add_encrypt_command(self, subparsers):
        cmd = subparsers.add_parser("encrypt", help="Encrypt text into a cipher packet")
        cmd.add_argument("--text", "-t", required=True, help="Plaintext")
        self._add_password(cmd)
        cmd.set_defaults(func=self.handle_encrypt)

    def add_decrypt_command(self, subparsers):
        cmd = subparsers.add_parser("decrypt", help="Decrypt a cipher packet")
        cmd.add_argument("--packet", "-k", required=True, help="salt:iv:ciphertext packet")
        self._add_password(cmd)
        cmd.set_defaults(func=self.handle_decrypt)

    def add_file_commands(self, subparsers):
        enc = subparsers.add_parser("encrypt-file", help="Encrypt a file into an .obs file")
        enc.add_argument("--input", "-i", required=True, help="File to encrypt")
        enc.add_argument("--output", "-o", help="Output .obs file (default: <input stem>.obs)")
        self._add_password(enc)
        enc.set_defaults(func=self.handle_encrypt_file)

        dec = subparsers.add_parser("decrypt-file", help="Decrypt an .obs file")
        dec.add_argument("--input", "-i", required=True, help=".obs file")
        dec.add_argument("--output", "-o", help="Output file (default: original filename)")
        self._add_password(dec)
        dec.set_defaults(func=self.handle_decrypt_file)

    def add_hash_command(self, subparsers):
        cmd = subparsers.add_parser("hash", help="Compute hash of text or a file")
        group = cmd.add_mutually_exclusive_group(required=True)
        group.add_argument("--text", "-t", help="Text to hash")
        group.add_argument("--input", "-i", help="File to hash")
        cmd.add_argument("--algorithm", "-a", default="SHA-256",
                         choices=["MD5", "SHA-1", "SHA-256", "SHA-384", "SHA-512"],
                         help="Hash algorithm")
        cmd.set_defaults(func=self.handle_hash)

    def add_stego_commands(self, subparsers):
        stego_parser = subparsers.add_parser("stego", help="Hide messages in images")
        stego_subparsers = stego_parser.add_subparsers(dest="stego_command")

        embed_cmd = stego_subparsers.add_parser("embed", help="Hide a message")
        embed_cmd.add_argument("--carrier", "-c", required=True, help="Cover image")
        embed_cmd.add_argument("--message", "-m", required=True, help="Message to hide")
        embed_cmd.add_argument("--output", "-o", required=True, help="Output PNG")
        embed_cmd.add_argument("--password", "-p", help="Encrypt the message first")
        embed_cmd.set_defaults(func=self.handle_stego_embed)

        extract_cmd = stego_subparsers.add_parser("extract", help="Reveal a hidden message")
        extract_cmd.add_argument("--carrier", "-c", required=True, help="Stego image")
        extract_cmd.add_argument("--password", "-p", help="Password if the message is encrypted")
        extract_cmd.set_defaults(func=self.handle_stego_extract)

        capacity_cmd = stego_subparsers.add_parser("capacity", help="Show image capacity")
        capacity_cmd.add_argument("--carrier", "-c", required=True, help="Cover image")
        capacity_cmd.set_defaults(func=self.handle_stego_capacity)

    def add_watermark_commands(self, subparsers):
        wm_parser = subparsers.add_parser("watermark", help="Invisible watermarks")
        wm_subparsers = wm_parser.add_subparsers(dest="watermark_command")

        add_cmd = wm_subparsers.add_parser("add", help="Embed a watermark")
        add_cmd.add_argument("--carrier", "-c", required=True, help="Image to watermark")
        add_cmd.add_argument("--text", "-t", required=True, help="Watermark text")
        add_cmd.add_argument("--output", "-o", required=True, help="Output PNG")
        add_cmd.add_argument("--password", "-p", help="Protect the watermark")
        add_cmd.set_defaults(func=self.handle_watermark_add)

        extract_cmd = wm_subparsers.add_parser("extract", help="Read a watermark")
        extract_cmd.add_argument("--carrier", "-c", required=True, help="Watermarked image")
        extract_cmd.add_argument("--password", "-p", help="Password for protected watermarks")
        extract_cmd.set_defaults(func=self.handle_watermark_extract)

    # Command handlers

    @staticmethod
    def _password(args) -> str:
        if args.password:
            return args.password
        return getpass.getpass("Password: ")

    def handle_encrypt(self, args):
        print(self.crypto.encrypt(args.text, self._password(args)))
        return EXIT_OK

    def handle_decrypt(self, args):
        print(self.crypto.decrypt(args.packet, self._password(args)))
        return EXIT_OK

    def handle_encrypt_file(self, args):
        source = Path(args.input)
        output = Path(args.output) if args.output else source.with_suffix(".obs")
        packet = self.crypto.encrypt_file(source, self._password(args), FileMetadata.for_path(source))
        output.write_bytes(packet)
        print(f"File encrypted: {output}")
        return EXIT_OK

    def handle_decrypt_file(self, args):
        source = Path(args.input)
        result = self.crypto.decrypt_file(source.read_bytes(), self._password(args))
        output = Path(args.output) if args.output else source.with_name(Path(result.filename).name)
        output.write_bytes(result.data)
        print(f"File decrypted: {output} ({result.mime_type}, {len(result.data)} bytes)")
        return EXIT_OK

    def handle_hash(self, args):
        source = args.text if args.text is not None else Path(args.input)
        print(self.crypto.hash(source, args.algorithm))
        return EXIT_OK

    def handle_stego_embed(self, args):
        self.stego.encode_file(args.carrier, args.output, args.message, args.password)
        print(f"Message hidden in {args.output}")
        return EXIT_OK

    def handle_stego_extract(self, args):
        print(self.stego.decode_file(args.carrier, args.password))
        return EXIT_OK

    def handle_stego_capacity(self, args):
        planner = self.stego.capacity(PixelBuffer.load(args.carrier))
        print(f"Available bits: {planner.available_bits}")
        print(f"Max message length: {planner.max_characters} characters")
        return EXIT_OK

    def handle_watermark_add(self, args):
        self.watermarks.add_to_file(args.carrier, args.output, args.text, args.password)
        print(f"Watermark added: {args.output}")
        return EXIT_OK

    def handle_watermark_extract(self, args):
        result = self.watermarks.extract_from_file(args.carrier, args.password)
        print(f"Watermark: {result.watermark}")
        print(f"Timestamp: {result.timestamp_readable}")
        print(f"Version:   {result.version}")
        print(f"Protected: {'yes' if result.is_protected else 'no'}")
        return EXIT_OK


def main():
    """Main entry point."""
    cli = ObscuraCLI()
    sys.exit(cli.run(sys.argv[1:]))


if __name__ == "__main__":
    main()
