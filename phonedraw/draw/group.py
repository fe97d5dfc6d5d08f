"""Lock-step draws over every prize of a group."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .prf import group_scope, prf_stream, rng_int_unbiased
from .records import Participant, Prize
from .reveal import RevealState
from .selection import matches_prefix, pick_weighted_pair

logger = logging.getLogger(__name__)


@dataclass
class GroupCard:
    """Independent reveal state of one prize inside a group draw."""

    prize: Prize
    reveal: RevealState = field(default_factory=RevealState)

    @property
    def prize_id(self) -> str:
        return self.prize.id

    def is_done(self, winners: dict[str, int]) -> bool:
        return self.reveal.complete or self.prize.id in winners


@dataclass
class CardAdvance:
    """What a single tick did to one card."""

    prize_id: str
    step: int
    pair: Optional[str] = None
    winner_id: Optional[int] = None
    auto_finished: bool = False
    random_fallback: bool = False
    warning: Optional[str] = None


@dataclass
class GroupTickResult:
    group: str
    advances: list[CardAdvance] = field(default_factory=list)

    @property
    def winners(self) -> dict[str, int]:
        """Assignments committed during this tick."""
        return {
            a.prize_id: a.winner_id for a in self.advances if a.winner_id is not None
        }


class GroupBoard:
    """Keyed collection of :class:`GroupCard` for the selected group.

    Cards are default-constructed when a prize joins the group and dropped
    when it leaves (see :meth:`sync`). Winners are written straight into
    the round's shared assignment map.
    """

    def __init__(self, group: str) -> None:
        self.group = group
        self.cards: dict[str, GroupCard] = {}
        self.in_flight = False

    def sync(self, prizes: Iterable[Prize]) -> None:
        """Align the cards with the group's members, in configured order."""
        members = [p for p in prizes if p.group == self.group]
        cards: dict[str, GroupCard] = {}
        for prize in members:
            card = self.cards.get(prize.id)
            if card is None or card.prize != prize:
                card = GroupCard(prize)
            cards[prize.id] = card
        dropped = set(self.cards) - set(cards)
        if dropped:
            logger.debug(f"Group {self.group}: dropped cards {sorted(dropped)}")
        self.cards = cards

    def reset(self) -> None:
        for card in self.cards.values():
            card.reveal.reset()
        self.in_flight = False

    def pool(
        self,
        card: GroupCard,
        participants: Iterable[Participant],
        claimed: set[int],
    ) -> list[Participant]:
        """Candidates of ``card`` excluding every participant in ``claimed``."""
        reveal = card.reveal
        return [
            p
            for p in participants
            if card.prize.accepts(p)
            and p.id not in claimed
            and matches_prefix(p, reveal.pairs, reveal.step)
        ]

    def is_done(self, winners: dict[str, int]) -> bool:
        return all(card.is_done(winners) for card in self.cards.values())

    def settle(
        self,
        participants: list[Participant],
        winners: dict[str, int],
    ) -> list[CardAdvance]:
        """Auto-finish, in prize order, every card left with one candidate."""
        claimed = set(winners.values())
        advances: list[CardAdvance] = []
        for card in self.cards.values():
            if card.is_done(winners):
                continue
            pool = self.pool(card, participants, claimed)
            if len(pool) == 1:
                advances.append(self._auto_finish(card, pool[0], winners, claimed))
        return advances

    def tick(
        self,
        seed: int,
        participants: list[Participant],
        winners: dict[str, int],
        *,
        hold: bool = False,
    ) -> Optional[GroupTickResult]:
        """Advance every unfinished card by exactly one pair.

        Parameters
        ----------
        seed : int
            Round seed.
        participants : list[Participant]
            Deduplicated roster in canonical order.
        winners : dict[str, int]
            Shared assignment map; updated in place as cards resolve.
        hold : bool, default: False
            Keep the board in flight until the display completes.

        Returns
        -------
        Optional[GroupTickResult]
            ``None`` when the tick was ignored (in flight or nothing left
            to draw).

        Notes
        -----
        The exclusion set is read from ``winners`` once at the start of the
        tick and grows as cards resolve, so a participant claimed by an
        earlier card is never resolved for a later card in the same tick.
        """

        if self.in_flight or self.is_done(winners):
            return None
        claimed = set(winners.values())
        result = GroupTickResult(group=self.group)
        scope = group_scope(self.group)

        for card in self.cards.values():
            if card.is_done(winners):
                continue
            reveal = card.reveal
            pool = self.pool(card, participants, claimed)
            if len(pool) == 1:
                result.advances.append(self._auto_finish(card, pool[0], winners, claimed))
                continue

            rng = prf_stream(seed, scope, reveal.step + 1, reveal.pairs, salt=card.prize_id)
            advance = CardAdvance(prize_id=card.prize_id, step=reveal.step)
            if pool:
                pair = pick_weighted_pair(pool, reveal.step, rng, prize_id=card.prize_id)
            else:
                pair = f"{rng_int_unbiased(rng, 100):02d}"
                advance.random_fallback = True
                logger.warning(
                    f"Group {self.group}: prize {card.prize_id} has no candidates, "
                    f"revealing random pair {pair}"
                )
            reveal.push(pair)
            advance.pair = pair
            advance.step = reveal.step

            narrowed = [p for p in pool if matches_prefix(p, reveal.pairs, reveal.step)]
            if reveal.complete:
                self._finalize(card, pool, narrowed, winners, claimed, advance)
            elif len(narrowed) == 1:
                finished = self._auto_finish(card, narrowed[0], winners, claimed)
                advance.step = finished.step
                advance.winner_id = finished.winner_id
                advance.auto_finished = True
            result.advances.append(advance)

        by_prize = {a.prize_id: a for a in result.advances}
        for extra in self.settle(participants, winners):
            advance = by_prize.get(extra.prize_id)
            if advance is None:
                result.advances.append(extra)
                continue
            advance.step = extra.step
            advance.winner_id = extra.winner_id
            advance.auto_finished = True
        self.in_flight = hold
        return result

    def _finalize(
        self,
        card: GroupCard,
        pool: list[Participant],
        narrowed: list[Participant],
        winners: dict[str, int],
        claimed: set[int],
        advance: CardAdvance,
    ) -> None:
        if narrowed:
            winner = narrowed[0]
        elif pool:
            winner = pool[0]
            advance.warning = (
                f"No participant matched {''.join(card.reveal.pairs)} for prize "
                f"{card.prize_id}; falling back to participant {winner.id}"
            )
            logger.warning(advance.warning)
        else:
            logger.info(f"Group {self.group}: prize {card.prize_id} finished without a winner")
            return
        winners[card.prize_id] = winner.id
        claimed.add(winner.id)
        advance.winner_id = winner.id
        logger.info(f"Prize {card.prize_id} won by participant {winner.id}")

    def _auto_finish(
        self,
        card: GroupCard,
        only: Participant,
        winners: dict[str, int],
        claimed: set[int],
    ) -> CardAdvance:
        card.reveal.fill(only.pairs)
        winners[card.prize_id] = only.id
        claimed.add(only.id)
        logger.info(f"Prize {card.prize_id} won by participant {only.id} (auto-finish)")
        return CardAdvance(
            prize_id=card.prize_id,
            step=card.reveal.step,
            winner_id=only.id,
            auto_finished=True,
        )


__all__ = ["CardAdvance", "GroupBoard", "GroupCard", "GroupTickResult"]
