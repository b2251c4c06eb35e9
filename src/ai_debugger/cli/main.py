import dotenv
import fire

from ai_debugger.cli import debug, server

dotenv.load_dotenv()


class CLI:
    """Main CLI interface for the AI debugger."""

    def __init__(self):
        self.server = server.ServerCommands()
        self.debug = debug.DebugCommands()


def main():
    """Entry point for the CLI."""
    fire.Fire(CLI)


if __name__ == "__main__":
    main()
