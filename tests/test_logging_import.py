"""
Test that consensus_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from consensus_logging and use the logger."""
    from ranking_consensus.consensus_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_bind_list_logger():
    """bind_list returns a logger usable with extra context."""
    from ranking_consensus.consensus_logging import bind_list

    logger = bind_list("top-games")
    logger.info("test_bound_message", items=3)


def test_package_imports_cleanly():
    """Top-level subpackages import without cycles."""
    import ranking_consensus.analysis_engine
    import ranking_consensus.api_client
    import ranking_consensus.consensus_service
    import ranking_consensus.heatmap
    import ranking_consensus.trend_analysis

    assert ranking_consensus.consensus_service.ConsensusDataService is not None
