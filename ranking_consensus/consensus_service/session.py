"""
Heatmap session: per-viewer state between the data service and a renderer.

Holds the heatmap config, the current community snapshot, generated cells,
trends and the viewer's comparison. Every change that affects rendering
regenerates the cells. apply_update() is the single entry point for pushed
changes (item_update, full_refresh, trend_update); delivery is the caller's
concern.
"""

from __future__ import annotations

import dataclasses
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ranking_consensus.analysis_engine.classifier import get_consensus_level
from ranking_consensus.analysis_engine.models import (
    CommunityRanking,
    ItemConsensus,
    UserVsCommunityComparison,
)
from ranking_consensus.analysis_engine.statistics import create_community_ranking
from ranking_consensus.config.thresholds import DEFAULT_THRESHOLDS, ConsensusThresholds
from ranking_consensus.consensus_logging import bind_list, get_logger
from ranking_consensus.consensus_service.data_service import Clock, ConsensusDataService
from ranking_consensus.core.enums import ColorScheme
from ranking_consensus.heatmap.cells import generate_heatmap_cells
from ranking_consensus.heatmap.colors import get_gradient
from ranking_consensus.heatmap.models import HeatmapCell, HeatmapConfig, HeatmapViewMode
from ranking_consensus.trend_analysis.models import ConsensusTrend
from ranking_consensus.utils.rounding import round_score

logger = get_logger(__name__)

DEFAULT_CATEGORY = "default"
DEFAULT_USER_ID = "current-user"
LOAD_FAILED_MESSAGE = "Failed to load community data"

_ITEM_FIELDS = frozenset(f.name for f in dataclasses.fields(ItemConsensus)) - {"item_id"}


class ConsensusUpdateType(str, Enum):
    ITEM_UPDATE = "item_update"
    FULL_REFRESH = "full_refresh"
    TREND_UPDATE = "trend_update"


@dataclass
class ConsensusUpdate:
    type: ConsensusUpdateType
    list_id: str
    item_id: str | None = None
    changes: dict[str, Any] = field(default_factory=dict)
    trends: list[ConsensusTrend] = field(default_factory=list)
    timestamp: int | None = None


class HeatmapSession:
    def __init__(
        self,
        service: ConsensusDataService,
        *,
        user_id: str = DEFAULT_USER_ID,
        config: HeatmapConfig | None = None,
        thresholds: ConsensusThresholds | None = None,
        clock: Clock = time.time,
    ) -> None:
        self._service = service
        self._thresholds = thresholds or DEFAULT_THRESHOLDS
        self._clock = clock
        self._initial_config = config or HeatmapConfig()
        self.user_id = user_id
        self.config = self._initial_config
        self.community: CommunityRanking | None = None
        self.cells: list[HeatmapCell] = []
        self.trends: dict[str, ConsensusTrend] = {}
        self.user_comparison: UserVsCommunityComparison | None = None
        self._user_positions: dict[str, int] | None = None
        self.is_loading = False
        self.last_sync: int | None = None
        self.error: str | None = None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _regenerate_cells(self) -> None:
        if self.community is None:
            self.cells = []
            return
        self.cells = generate_heatmap_cells(
            self.community,
            self.config.mode,
            self._user_positions,
            get_gradient(self.config.color_scheme),
            self._thresholds,
        )

    def _recompare(self) -> None:
        if self.community is None or self._user_positions is None:
            return
        self.user_comparison = self._service.compare_user_to_community(
            self.user_id, self.community.list_id, self._user_positions, self.community
        )

    # Configuration

    async def set_enabled(self, enabled: bool) -> None:
        self.config = self.config.with_changes(enabled=enabled)
        if enabled:
            await self.refresh_data()

    def set_mode(self, mode: HeatmapViewMode | str) -> None:
        self.config = self.config.with_changes(mode=HeatmapViewMode(mode))
        self._regenerate_cells()

    def set_opacity(self, opacity: float) -> None:
        self.config = self.config.with_changes(opacity=opacity)

    def toggle_labels(self) -> None:
        self.config = self.config.with_changes(show_labels=not self.config.show_labels)

    def toggle_badges(self) -> None:
        self.config = self.config.with_changes(show_badges=not self.config.show_badges)

    def set_color_scheme(self, scheme: ColorScheme | str) -> None:
        self.config = self.config.with_changes(color_scheme=ColorScheme(scheme))
        self._regenerate_cells()

    # Data

    async def load_community_data(
        self,
        list_id: str,
        category_id: str = DEFAULT_CATEGORY,
        force_refresh: bool = False,
    ) -> bool:
        """Load a community ranking and rebuild cells. Returns False and sets error on failure."""
        self.is_loading = True
        self.error = None
        try:
            data = await self._service.get_community_ranking(list_id, category_id, force_refresh)
        finally:
            self.is_loading = False

        log = bind_list(list_id)
        if data is None:
            self.error = LOAD_FAILED_MESSAGE
            log.warning("heatmap_load_failed", category_id=category_id)
            return False

        self.community = data
        self.trends = self._service.get_trends(list_id, category_id)
        self._recompare()
        self._regenerate_cells()
        self.last_sync = self._now_ms()
        log.debug("heatmap_loaded", category_id=category_id, cells=len(self.cells))
        return True

    async def refresh_data(self, force_refresh: bool = False) -> bool:
        if self.community is None:
            return False
        return await self.load_community_data(
            self.community.list_id, self.community.category_id, force_refresh
        )

    def update_item(self, item_id: str, **changes: Any) -> bool:
        """
        Replace one item with changed fields and rebuild the aggregate.

        Keeps controversy_score = 100 - consensus_score and the level in
        step with the score. Unknown fields are ignored.
        """
        if self.community is None:
            return False
        current = self.community.item(item_id)
        if current is None:
            bind_list(self.community.list_id).warning("heatmap_item_unknown", item_id=item_id)
            return False

        unknown = set(changes) - _ITEM_FIELDS
        if unknown:
            bind_list(self.community.list_id).warning(
                "heatmap_item_fields_ignored", item_id=item_id, fields=sorted(unknown)
            )
        accepted = {k: v for k, v in changes.items() if k in _ITEM_FIELDS}
        if "consensus_score" not in accepted and "controversy_score" in accepted:
            accepted["consensus_score"] = 100 - accepted["controversy_score"]
        if "consensus_score" in accepted:
            score = accepted["consensus_score"]
            accepted["controversy_score"] = 100 - score
            accepted["consensus_level"] = get_consensus_level(score, self._thresholds)

        updated = dataclasses.replace(current, **accepted)
        items = [updated if i.item_id == item_id else i for i in self.community.items]
        self.community = create_community_ranking(
            self.community.list_id,
            self.community.category_id,
            items,
            now_ms=self._now_ms(),
            config=self._thresholds,
        )
        self._recompare()
        self._regenerate_cells()
        return True

    async def apply_update(self, update: ConsensusUpdate) -> bool:
        """Apply a pushed change. Updates for another list are ignored."""
        if self.community is not None and update.list_id != self.community.list_id:
            logger.debug("consensus_update_ignored", list_id=update.list_id, reason="other_list")
            return False

        if update.type == ConsensusUpdateType.ITEM_UPDATE:
            if update.item_id is None:
                logger.warning("consensus_update_invalid", list_id=update.list_id, reason="missing_item_id")
                return False
            return self.update_item(update.item_id, **update.changes)
        if update.type == ConsensusUpdateType.FULL_REFRESH:
            return await self.refresh_data(force_refresh=True)
        if update.type == ConsensusUpdateType.TREND_UPDATE:
            self.trends = {**self.trends, **{t.item_id: t for t in update.trends}}
            return True
        return False

    # Comparison

    def set_user_ranking(self, positions: Mapping[str, int]) -> bool:
        if self.community is None:
            return False
        self._user_positions = dict(positions)
        self._recompare()
        self._regenerate_cells()
        return True

    def clear_user_ranking(self) -> None:
        self.user_comparison = None
        self._user_positions = None
        self._regenerate_cells()

    # Read helpers

    def cell_at(self, position: int) -> HeatmapCell | None:
        if not self.config.enabled:
            return None
        for cell in self.cells:
            if cell.position == position:
                return cell
        return None

    def stats(self) -> dict[str, Any]:
        if self.community is None:
            return {
                "total_rankings": 0,
                "overall_consensus": 0,
                "item_count": 0,
                "most_controversial": [],
                "most_agreed": [],
            }
        return {
            "total_rankings": round_score(self.community.total_rankings),
            "overall_consensus": self.community.overall_consensus,
            "item_count": len(self.community.items),
            "most_controversial": [i.item_id for i in self.community.most_controversial],
            "most_agreed": [i.item_id for i in self.community.most_agreed],
        }

    def reset(self) -> None:
        self.config = self._initial_config
        self.community = None
        self.cells = []
        self.trends = {}
        self.user_comparison = None
        self._user_positions = None
        self.is_loading = False
        self.last_sync = None
        self.error = None
