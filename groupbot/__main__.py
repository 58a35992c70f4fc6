"""Package entry point for ``python -m groupbot``.

WHY: The bot runs either over Socket Mode (no public URL needed) or as an
HTTP server that receives Slack's slash command and interactivity webhooks.

HOW: Checks sys.argv for the ``--http`` flag. If present, starts the
FastAPI server. Otherwise, starts the Socket Mode bot.
"""

import sys

if __name__ == "__main__":
    if "--http" in sys.argv:
        from groupbot.server.app import run_api
        run_api()
    else:
        from groupbot.slack.bot import main
        main()
