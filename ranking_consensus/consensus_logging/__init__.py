"""
Structured logging for Ranking Consensus.

JSON logs with timestamp, event_type, list_id and computation context.
Use get_logger() in all engine modules.
"""

from ranking_consensus.consensus_logging.logger import bind_list, configure_structlog, get_logger

__all__ = ["bind_list", "configure_structlog", "get_logger"]
