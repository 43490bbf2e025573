from typing import List, Tuple
import logging
import re

from tracked_defaults.exceptions import ParserError

logger = logging.getLogger(__name__)

# double-quoted, single-quoted, or bare token
TOKEN_RE = re.compile(r'"([^"]*)"|\'([^\']*)\'|(\S+)')

def tokenize(command: str) -> List[str]:
    return [dq or sq or bare for dq, sq, bare in TOKEN_RE.findall(command)]

class CommandParser:
    def __init__(self):
        # (min, max) arguments for each command
        self._arities = {
            "tset": (3, 3),       # e.g., tset volume double 0.0
            "get": (1, 1),
            "tracked": (1, 1),
            "timestamp": (1, 1),
            "tdel": (1, 1),
            "untrack": (1, 1),
            "keys": (0, 0),
            "flushdb": (0, 0),
        }

    def parse(self, command: str) -> Tuple[str, List[str]]:
        """
        Split a command string into (command_name, args), checking arity
        """
        tokens = tokenize(command)
        logger.debug(f"Tokens: {tokens}")
        if not tokens:
            raise ParserError("Empty command")

        cmd, *args = tokens
        cmd = cmd.lower()
        arity = self._arities.get(cmd)
        if arity is None:
            raise ParserError(f"Unknown command: {cmd}")

        low, high = arity
        if not low <= len(args) <= high:
            raise ParserError(f"Invalid number of arguments for {cmd}: expected {low}-{high}, got {len(args)}")
        return cmd, args
