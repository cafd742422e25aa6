# fluxgate/logging/tags.py
"""
Logging subsystem tags.

Prefix log messages with these so output stays searchable:
    logger.info(f"{DISCOVERY} Found 3 units")
"""

DISCOVERY = "[DISCOVERY]"
EXTRACT = "[EXTRACT]"
GRAPH = "[GRAPH]"
VALIDATION = "[VALIDATION]"
GATE = "[GATE]"
CONFIG = "[CONFIG]"
CLI = "[CLI]"
