"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["connect", "ls", "refresh", "download", "download-all", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#667EEA bold",
        "command": "#764BA2 bold",
    }
)

VIOLET = "\033[38;2;102;126;234m"
GREEN = "\033[32m"
RESET = "\033[0m"

LOGO = f"""{VIOLET}
 ██████╗ ██╗   ██╗███████╗██╗  ██╗ █████╗ ██████╗ ███████╗
 ██╔══██╗╚██╗ ██╔╝██╔════╝██║  ██║██╔══██╗██╔══██╗██╔════╝
 ██████╔╝ ╚████╔╝ ███████╗███████║███████║██████╔╝█████╗
 ██╔═══╝   ╚██╔╝  ╚════██║██╔══██║██╔══██║██╔══██╗██╔══╝
 ██║        ██║   ███████║██║  ██║██║  ██║██║  ██║███████╗
 ╚═╝        ╚═╝   ╚══════╝╚═╝  ╚═╝╚═╝  ╚═╝╚═╝  ╚═╝╚══════╝
{RESET}"""

WELCOME_TITLE = "PyShare - Browse files shared on your network"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "pyshare> "

HELP_TEXT = """Available commands:
  connect <ip|url> [port]             Connect to a device and list its shared files
  ls                                  List files of the connected device
  refresh                             Reload the connected device's file list
  download <filename> [output_path]   Download one file (defaults to downloads/)
  download-all [output_path]          Download all files as a zip (PyShare devices only)
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Devices running PyShare are browsed through their API; any other file
server is browsed by reading its directory listing page.
Examples:
  connect 192.168.1.20
  connect 192.168.1.20 9000
  connect http://nas.local:8080
  download "holiday photo.jpg"
  download report.pdf downloads/renamed.pdf
  download-all"""
