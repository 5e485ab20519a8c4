"""
Jassbot

Matrix chat bot answering JASS scripting-language reference questions from
the jassbot documentation service.

Philosophy:
- One message, one pipeline run, at most one reply
- Commands that are not ours are ignored silently
- "No results found" is the only failure a room ever sees
- Service failures are for operators: logged and counted, never posted

Usage:
    from jassbot.common import load_config, DocServiceClient
    from jassbot.bot import Dispatcher, parse, format_reply
    from jassbot.bot.handlers import MatrixHandler
"""

__version__ = "0.1.0"
