from dataclasses import dataclass
import argparse
import logging

logger = logging.getLogger(__name__)

# Constants
DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 6419
DEFAULT_THEME = 'auto'
VALID_THEMES = ('light', 'dark', 'auto')
REQUEST_TIMEOUT = 30
RELOAD_KEEPALIVE = 15
STATIC_PREFIX = '/static/'
RELOAD_ENDPOINT = '/__reload__'


def normalize_theme(theme: str) -> str:
    """Return a supported theme name, falling back to the default."""
    if theme in VALID_THEMES:
        return theme
    logger.warning(f"Unknown theme '{theme}', defaulting to '{DEFAULT_THEME}'")
    return DEFAULT_THEME


@dataclass(frozen=True)
class Config:
    """Command line settings, resolved once before the server starts."""
    path: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    theme: str = DEFAULT_THEME
    browser: bool = True
    bounding_box: bool = True
    live_reload: bool = True
    debug: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> 'Config':
        """Create configuration from parsed arguments."""
        return cls(
            path=args.path,
            host=args.host,
            port=args.port,
            theme=normalize_theme(args.theme),
            browser=args.browser,
            bounding_box=args.bounding_box,
            live_reload=args.reload,
            debug=args.debug,
        )


@dataclass(frozen=True)
class ServeContext:
    """
    Process-wide serving state.

    Built once at startup and handed to the app factory; never mutated
    afterwards, so request threads read it without locking.
    """
    root_directory: str
    initial_file: str = ''
    theme: str = DEFAULT_THEME
    bounding_box: bool = True
    live_reload: bool = False
