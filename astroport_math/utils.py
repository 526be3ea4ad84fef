"""
Helper functions shared by the facade and callers of the engine.

Covers structured logger construction and the JSON boundary: reading a
reserves array and rendering a result object.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from .exceptions import InvalidInput


LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
LOG_FORMAT_MINIMAL = "%(asctime)s | %(message)s"


# Logging utilities
def get_logger(
    name: str,
    level: Union[str, int] = logging.INFO,
    extra: Optional[Dict[str, Any]] = None,
    minimal: bool = False,
) -> Union[logging.Logger, logging.LoggerAdapter]:
    """
    Logger for code pricing pools through the engine.

    The first call for a name attaches one console handler; later calls
    reuse it. Fields in ``extra`` (e.g. ``{"pool": "ntrn-usdc"}``) are
    rendered ahead of every message.

    Args:
        name: Logger name (typically __name__)
        level: Level applied when the logger has none yet
        extra: Context fields rendered with every record
        minimal: Time and message only

    Returns:
        The logger, or a LoggerAdapter carrying ``extra``
    """
    logger = logging.getLogger(name)
    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    context = {f"extra_{key}": value for key, value in (extra or {}).items()}

    if not logger.handlers:
        fmt = LOG_FORMAT_MINIMAL if minimal else LOG_FORMAT
        if context:
            fields = " | ".join(f"{key[6:]}=%({key})s" for key in context)
            fmt = fmt.replace("%(message)s", f"{fields} | %(message)s")

        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))
        logger.addHandler(handler)

    if context:
        return logging.LoggerAdapter(logger, context)
    return logger


# JSON utilities
def load_reserves(reserves: Union[str, Sequence[Any]]) -> List[Any]:
    """
    Read a reserves argument given as JSON array text or as a sequence.

    Args:
        reserves: ``'["1000", "2000"]'`` or ``["1000", "2000"]``

    Returns:
        List of the two reserve literals, still unparsed

    Raises:
        InvalidInput: If the JSON is malformed or does not hold two entries
    """
    if isinstance(reserves, (str, bytes)):
        try:
            reserves = json.loads(reserves, parse_float=str)
        except json.JSONDecodeError as e:
            raise InvalidInput(
                f"reserves is not valid JSON: {e}", field="reserves", value=reserves
            ) from e

    if isinstance(reserves, (str, bytes, dict)) or not isinstance(reserves, Sequence):
        raise InvalidInput(
            f"reserves must be an array, got {type(reserves).__name__}",
            field="reserves",
        )
    if len(reserves) != 2:
        raise InvalidInput(
            f"reserves must hold exactly two entries, got {len(reserves)}",
            field="reserves",
        )
    return list(reserves)


def dump_result(data: Dict[str, Any]) -> str:
    """Serialize a result mapping to compact JSON with a stable key order."""
    return json.dumps(data, separators=(",", ":"))


def load_result(payload: str) -> Dict[str, int]:
    """Decode a facade response into a dict of integer amounts."""
    return {key: int(value) for key, value in json.loads(payload).items()}
