from ranking_consensus.utils.rounding import round_half_up, round_score

__all__ = ["round_half_up", "round_score"]
