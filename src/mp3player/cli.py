"""
mp3player CLI - Entry point

Subcommands:
- play: play audio files or a JSON playlist
- stop: stop the running playback session over IPC
- init-config: write the default configuration file
"""

import argparse
import sys
from typing import List, Optional

from loguru import logger

from mp3player import __version__
from mp3player.core import config as config_module
from mp3player.core.console import print_error
from mp3player.core.output import log, setup_loguru
from mp3player.domain.playlists import PlayRequest
from mp3player.utils.parsers import parse_csv_list


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mp3player",
        description="mp3player - play audio files with seek, trim, repeat and volume control",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument(
        '--config',
        metavar='FILE',
        help='Configuration file (default: ./config.toml or ~/.config/mp3player/config.toml)'
    )
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Override the configured log level'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Also write log output to stderr'
    )

    subparsers = parser.add_subparsers(dest='subcommand', help='Available commands')

    play_parser = subparsers.add_parser(
        'play',
        help='Play audio files or a playlist',
        description='Play every track at once, each on its own sink. '
                    'Positions and takes are HH:MM:SS, skips are whole seconds; '
                    'comma-separated lists line up with the files by index.'
    )
    # Files and playlist file are mutually exclusive; the resolver rejects both or neither
    play_parser.add_argument('files', nargs='*', default=[], help='Audio files to play')
    play_parser.add_argument(
        '-p', '--playlist-file',
        metavar='FILE',
        help='JSON playlist file (cannot be combined with file arguments)'
    )
    play_parser.add_argument('-b', '--base-path', metavar='DIR', help='Directory prepended to every file')
    play_parser.add_argument(
        '--position',
        metavar='HH:MM:SS[,...]',
        help='Seek position per file, comma-separated'
    )
    play_parser.add_argument(
        '--skip',
        metavar='SECONDS[,...]',
        help='Seconds to skip after seeking, per file, comma-separated'
    )
    play_parser.add_argument(
        '--take',
        metavar='HH:MM:SS[,...]',
        help='Maximum playback duration per file, comma-separated (empty = to the end)'
    )
    play_parser.add_argument('-r', '--repeat', action='store_true', help='Loop every track forever')
    play_parser.add_argument('-v', '--volume', type=float, help='Volume for all tracks (1.0 = 100%%)')

    subparsers.add_parser('stop', help='Stop the running playback session')
    subparsers.add_parser('init-config', help='Write the default configuration file')

    return parser


def request_from_args(args: argparse.Namespace) -> PlayRequest:
    """Collect play arguments into a PlayRequest."""
    return PlayRequest(
        files=list(args.files or []),
        playlist_file=args.playlist_file,
        base_path=args.base_path,
        positions=parse_csv_list(args.position),
        skips=parse_csv_list(args.skip),
        takes=parse_csv_list(args.take),
        repeat=args.repeat,
        volume=args.volume,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the mp3player command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.subcommand:
        parser.print_help()
        sys.exit(1)

    cfg = config_module.load_config(args.config)
    if args.log_level:
        cfg.logging.level = args.log_level
    if args.verbose:
        cfg.logging.console_output = True

    setup_loguru(
        config_module.get_log_file_path(cfg),
        level=cfg.logging.level,
        max_file_size_mb=cfg.logging.max_file_size_mb,
        backup_count=cfg.logging.backup_count,
        console_output=cfg.logging.console_output,
    )
    logger.info("Begin")
    logger.info(f"args -> {args}")

    if args.subcommand == 'play':
        # Imported lazily so `stop` does not pay for the playback stack
        from mp3player.main import run_play

        exit_code = run_play(request_from_args(args), cfg)

    elif args.subcommand == 'stop':
        from mp3player.main import run_stop

        exit_code = run_stop()

    elif args.subcommand == 'init-config':
        path = config_module.get_config_path(args.config)
        if path.exists():
            print_error(f"Configuration already exists: {path}")
            exit_code = 1
        else:
            config_module.save_default_config(path)
            log(f"Created default configuration at: {path}")
            exit_code = 0

    else:
        parser.print_help()
        exit_code = 1

    logger.info(f"End (exit code {exit_code})")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
