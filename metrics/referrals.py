# metrics/referrals.py
from typing import Dict, Iterable, List

from models import ReferralEdge, ReferralType, ReferrerSummary


class ReferralAggregationHelper:

    @staticmethod
    def aggregate(edges: Iterable[ReferralEdge]) -> List[ReferrerSummary]:
        """
        Fold referral edges into one row per referrer in a single pass.

        Rows come back sorted by ``total_referrals`` descending. The sort is
        stable, so referrers with equal totals keep the order in which the API
        first listed them; there is no secondary key.
        """
        summaries: Dict[str, ReferrerSummary] = {}
        for edge in edges:
            key = edge.referrer.id or edge.referrer.email
            if key is None:
                continue
            summary = summaries.get(key)
            if summary is None:
                summary = ReferrerSummary(referrer=edge.referrer)
                summaries[key] = summary

            if edge.type == ReferralType.DIRECT:
                summary.direct_referrals += 1
            else:
                summary.indirect_referrals += 1
            summary.total_referrals += 1
            summary.coins_earned += edge.coins_earned
            summary.referred.append(edge.referred)

        return sorted(summaries.values(), key=lambda s: s.total_referrals, reverse=True)

    @staticmethod
    def search(summaries: List[ReferrerSummary], query: str) -> List[ReferrerSummary]:
        query = (query or "").strip().lower()
        if not query:
            return list(summaries)
        return [
            s for s in summaries
            if query in (s.referrer.name or "").lower() or query in (s.referrer.email or "").lower()
        ]
