"""Slack bot integration for GroupBot.

WHY: Users create groups from inside Slack with a slash command and an
interactive ephemeral menu.

HOW: slack-bolt handlers in bot.py translate commands and button clicks
into SessionManager transitions; messages.py renders the Block Kit menu.
The app runs over Socket Mode or behind the FastAPI server.

RULES:
- Socket Mode requires SLACK_BOT_TOKEN and SLACK_APP_TOKEN
- HTTP mode requires SLACK_BOT_TOKEN and SLACK_SIGNING_SECRET
- All Slack actions must be ack()'d within 3 seconds
"""
