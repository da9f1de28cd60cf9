"""Seat class enum with normalisation of the many spellings the inventory uses."""

from enum import StrEnum
import re


class SeatClass(StrEnum):
    FIRST = 'First'
    BUSINESS = 'Business'
    PREMIUM_ECONOMY = 'PremiumEconomy'
    ECONOMY = 'Economy'

    @classmethod
    def normalize(cls, raw: str | None) -> 'SeatClass':
        """
        Map a free-form cabin label to a SeatClass.

        Accepts 'first', 'First Class', 'premium eco', 'PREMECO', 'eco', ...
        Anything unrecognised is treated as Economy.
        """
        if not raw:
            return cls.ECONOMY
        key = re.sub(r'[\s_-]+', '', str(raw)).lower()
        if key.endswith('class'):
            key = key[: -len('class')]
        return _ALIASES.get(key, cls.ECONOMY)


_ALIASES = {
    'first': SeatClass.FIRST,
    'business': SeatClass.BUSINESS,
    'premiumeconomy': SeatClass.PREMIUM_ECONOMY,
    'premiumeco': SeatClass.PREMIUM_ECONOMY,
    'premeco': SeatClass.PREMIUM_ECONOMY,
    'economy': SeatClass.ECONOMY,
    'eco': SeatClass.ECONOMY,
}
