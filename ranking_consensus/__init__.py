"""
Ranking Consensus: community consensus aggregation and trend analysis.

Turns a population of individual user rankings into per-item position
statistics, consensus/controversy scores, badges, heatmap cells and
regression-based trends. In-process library: network I/O is delegated to
an API client collaborator; rendering is left to the UI layer.
"""

__version__ = "0.1.0"
