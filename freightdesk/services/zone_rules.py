from typing import Iterable, List, Optional, Tuple

from freightdesk.schemas.pricing import ZoneRule


def country_key(country: Optional[str]) -> str:
    return (country or "").strip().casefold()


class ZoneRuleTable:
    """Active zone rules in matching order: zone, then min_km, then id."""

    def __init__(self, rules: Iterable[ZoneRule]):
        self._rules: List[ZoneRule] = sorted(
            (rule for rule in rules if rule.is_active),
            key=lambda rule: (rule.zone, rule.min_km, rule.id),
        )

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    def for_country(self, country: Optional[str]) -> List[ZoneRule]:
        key = country_key(country)
        return [rule for rule in self._rules if country_key(rule.country) == key]

    def candidates(
        self,
        destination_country: Optional[str],
        origin_country: Optional[str] = None,
    ) -> List[ZoneRule]:
        rules = self.for_country(destination_country)
        if not rules and origin_country:
            rules = self.for_country(origin_country)
        return rules

    def match(
        self,
        distance_km: float,
        destination_country: Optional[str],
        origin_country: Optional[str] = None,
    ) -> Optional[ZoneRule]:
        for rule in self.candidates(destination_country, origin_country):
            if rule.contains(distance_km):
                return rule
        return None

    def shadowed(
        self,
        matched: ZoneRule,
        distance_km: float,
        destination_country: Optional[str],
        origin_country: Optional[str] = None,
    ) -> List[ZoneRule]:
        """Other candidate rules that also contain ``distance_km``."""
        return [
            rule
            for rule in self.candidates(destination_country, origin_country)
            if rule.id != matched.id and rule.contains(distance_km)
        ]

    def overlaps(self, country: Optional[str] = None) -> List[Tuple[ZoneRule, ZoneRule]]:
        """Pairs of same-country rules whose [min_km, max_km) ranges intersect."""
        rules = self.for_country(country) if country else self._rules
        pairs = []
        for i, first in enumerate(rules):
            for second in rules[i + 1:]:
                if country_key(first.country) != country_key(second.country):
                    continue
                if first.min_km < second.max_km and second.min_km < first.max_km:
                    pairs.append((first, second))
        return pairs
