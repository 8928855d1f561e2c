"""
mdserve - render markdown files and directories as HTML in the browser.

Usage:
    mdserve [path] --theme dark --port 6419
"""

import argparse
import logging
import sys
import webbrowser
from urllib.parse import quote

from .config import DEFAULT_HOST, DEFAULT_PORT, DEFAULT_THEME, Config, ServeContext
from .errors import BindError, PathNotFound
from .network import bind_listener, create_server
from .paths import resolve_target
from .reload import DirectoryWatcher, ReloadNotifier
from .routes import create_app

logger = logging.getLogger(__name__)


def parse_arguments(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='mdserve',
        description="Render markdown documents as html. Can handle a single file or a directory of markdown files."
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Markdown file or directory to serve (default: current directory)"
    )
    parser.add_argument(
        "--theme",
        type=str,
        default=DEFAULT_THEME,
        help="Select css theme [light/dark/auto] (default: auto)"
    )
    parser.add_argument(
        "-b", "--browser",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Open new browser tab (default: on)"
    )
    parser.add_argument(
        "-H", "--host",
        type=str,
        default=DEFAULT_HOST,
        help=f"Host to bind the server to (default: {DEFAULT_HOST})"
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port to run the server on (default: {DEFAULT_PORT})"
    )
    parser.add_argument(
        "--bounding-box",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Add bounding box to HTML (default: on)"
    )
    parser.add_argument(
        "--reload",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Reload open pages when files change (default: on)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    return parser.parse_args(argv)


def build_context(config: Config) -> ServeContext:
    """Resolve the target path into the read-only serving context."""
    root_directory, initial_file = resolve_target(config.path)
    return ServeContext(
        root_directory=root_directory,
        initial_file=initial_file,
        theme=config.theme,
        bounding_box=config.bounding_box,
        live_reload=config.live_reload,
    )


def initial_url(host: str, port: int, initial_file: str) -> str:
    """URL opened in the browser at startup."""
    return f"http://{host}:{port}/{quote(initial_file)}"


def open_browser(url: str):
    try:
        if not webbrowser.open(url):
            print("❌ Error opening browser: no runnable browser found")
    except webbrowser.Error as e:
        print(f"❌ Error opening browser: {e}")


def serve(config: Config):
    """
    Resolve, bind, announce and serve until interrupted.

    Raises:
        PathNotFound: If the target path cannot be located.
        BindError: If no port can be bound.
    """
    context = build_context(config)
    listener, port = bind_listener(config.host, config.port)

    notifier = ReloadNotifier() if context.live_reload else None
    app = create_app(context, notifier=notifier)
    try:
        server = create_server(app, listener)
    finally:
        listener.close()

    url = initial_url(config.host, port, context.initial_file)
    print(f"🚀 Starting server: {url}")
    print(f"📁 Serving directory: {context.root_directory}")
    print("\nPress Ctrl+C to stop the server")

    if config.browser:
        open_browser(url)

    watcher = None
    if notifier is not None:
        watcher = DirectoryWatcher(context.root_directory, notifier)
        watcher.start()

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\n👋 Server stopped")
    finally:
        if watcher is not None:
            watcher.stop()
        server.server_close()


def main(argv=None):
    """Main function to run the documentation server."""
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
    config = Config.from_args(args)

    try:
        serve(config)
    except PathNotFound as e:
        print(f"Error: {e}")
        sys.exit(1)
    except BindError as e:
        print(f"Error: failed to find available port: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
