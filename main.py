#!/usr/bin/env python3
"""
hostfetch - print a short report of facts about the running host

Every fact is off by default; pass the flags for the ones you want.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console

import i18n
from errors import ConfigurationError
from output import DEFAULT_CORNER, DEFAULT_LOGO, OutputOptions, Renderer, Style
from providers import PACKAGE_MANAGERS
from report import Selection, collect

logger = logging.getLogger(__name__)

console = Console()

# flag dest → fact name
FACT_FLAGS = {
    "user": "user",
    "host": "host",
    "uptime": "uptime",
    "distro": "distro",
    "kernel": "kernel",
    "wm": "wm",
    "editor": "editor",
    "shell": "shell",
    "cpu": "cpu",
    "memory": "memory",
    "ip_address": "ip_address",
}

CREDITS = [
    "Maintainer:       valley             (Github: Phate6660)",
    "Contributor:      Kied Llaentenn     (Github: kiedtl)",
    "Contributor:      Laurențiu Nicola   (Github: lnicola)",
]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hostfetch",
        description=i18n.t('cli.arg_description', managers=", ".join(PACKAGE_MANAGERS)),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hostfetch -U -H -d -k -u             # user, host, distro, kernel, uptime
  hostfetch --cpu -r -p pacman -l      # cpu, memory, package count, logo
  hostfetch -M -U -H                   # values only, one per line
        """,
    )
    parser.add_argument("--credits", action="store_true", help=i18n.t('cli.arg_credits'))

    facts = parser.add_argument_group(i18n.t('cli.group_facts'))
    facts.add_argument("-U", "--user", action="store_true", help=i18n.t('cli.arg_user'))
    facts.add_argument("-H", "--host", action="store_true", help=i18n.t('cli.arg_host'))
    facts.add_argument("-u", "--uptime", action="store_true", help=i18n.t('cli.arg_uptime'))
    facts.add_argument("-d", "--distro", action="store_true", help=i18n.t('cli.arg_distro'))
    facts.add_argument("-k", "--kernel", action="store_true", help=i18n.t('cli.arg_kernel'))
    facts.add_argument("-w", "--wm", action="store_true", help=i18n.t('cli.arg_wm'))
    facts.add_argument("-e", "--editor", action="store_true", help=i18n.t('cli.arg_editor'))
    facts.add_argument("-s", "--shell", action="store_true", help=i18n.t('cli.arg_shell'))
    facts.add_argument("--cpu", action="store_true", help=i18n.t('cli.arg_cpu'))
    facts.add_argument("-r", "--memory", action="store_true", help=i18n.t('cli.arg_memory'))
    facts.add_argument("-i", "--ip_address", action="store_true", help=i18n.t('cli.arg_ip_address'))
    facts.add_argument("-p", "--packages", metavar="PKG_MNGR", default=None, help=i18n.t('cli.arg_packages'))
    facts.add_argument("-m", "--music", metavar="SOURCE", default=None, help=i18n.t('cli.arg_music'))

    look = parser.add_argument_group(i18n.t('cli.group_output'))
    look.add_argument("-l", "--logo", action="store_true", help=i18n.t('cli.arg_logo'))
    look.add_argument("-L", "--logofile", metavar="FILE", default=None, help=i18n.t('cli.arg_logofile'))
    look.add_argument("-C", "--corners", metavar="CHARACTER", default=DEFAULT_CORNER, help=i18n.t('cli.arg_corners'))
    look.add_argument("-M", "--minimal", action="store_true", help=i18n.t('cli.arg_minimal'))
    look.add_argument("-b", "--no-bold", action="store_true", help=i18n.t('cli.arg_no_bold'))
    look.add_argument("-B", "--no-borders", action="store_true", help=i18n.t('cli.arg_no_borders'))
    look.add_argument("-c", "--no-caps", action="store_true", help=i18n.t('cli.arg_no_caps'))

    parser.add_argument("--debug", action="store_true", help=i18n.t('cli.arg_debug'))
    return parser


def selection_from_args(args: argparse.Namespace) -> Selection:
    facts = frozenset(fact for dest, fact in FACT_FLAGS.items() if getattr(args, dest))
    return Selection(facts=facts, packages=args.packages, music=args.music)


def options_from_args(args: argparse.Namespace) -> OutputOptions:
    if args.minimal:
        style = Style.MINIMAL
    elif args.no_borders:
        style = Style.PLAIN
    else:
        style = Style.BORDERED

    if args.minimal or args.no_borders:
        corner = " "
    else:
        corner = (args.corners or DEFAULT_CORNER)[0]

    return OutputOptions(
        style=style,
        bold=not args.no_bold,
        uppercase_labels=not args.no_caps,
        show_borders=not args.no_borders,
        corner_glyph=corner,
    )


def load_logo(logofile: Optional[str]) -> str:
    """The user's logo file if one was given, otherwise the built-in art."""
    if not logofile:
        return DEFAULT_LOGO
    try:
        return Path(logofile).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(i18n.t('cli.logo_failed', error=e)) from e


def main(argv=None) -> int:
    """Entry point"""
    i18n.init()

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.credits:
        console.print()
        for line in CREDITS:
            console.print(line, highlight=False)
        console.print(f"\n{i18n.t('cli.credits_thanks')}\n", highlight=False)
        return 0

    selection = selection_from_args(args)
    # Nothing asked for, nothing to print.
    if selection.is_empty() and not args.logo:
        return 0

    options = options_from_args(args)

    logo = None
    if args.logo:
        try:
            logo = load_logo(args.logofile)
        except ConfigurationError as e:
            logger.error(f"{e}")

    entries = collect(selection)

    out = sys.stdout
    if args.logo:
        out.write("\n")
    color = out.isatty() and "NO_COLOR" not in os.environ
    Renderer(options, color=color).write(entries, logo, file=out)
    out.write("\n")
    out.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
