"""TaskPilot: manage Trello boards and GitHub issues from the terminal."""

__version__ = "0.1.0"
