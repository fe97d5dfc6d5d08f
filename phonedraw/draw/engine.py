"""Draw engine driving the staged digit-pair reveal."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Union

from .group import GroupBoard, GroupTickResult
from .prf import prf_stream
from .records import Participant, Prize, dedupe_participants
from .reveal import RevealState
from .selection import matches_prefix, pick_weighted_pair

logger = logging.getLogger(__name__)


@dataclass
class DrawOutcome:
    """Value object describing one state transition of the active prize.

    Attributes
    ----------
    prize_id : str
        Prize the transition applied to.
    step : int
        Reveal step after the transition.
    pair : Optional[str]
        Pair revealed by a manual draw; ``None`` for a pure auto-finish.
    winner_id : Optional[int]
        Participant committed by this transition, if any.
    auto_finished : bool
        ``True`` when the winner was committed because a single candidate
        remained.
    warning : Optional[str]
        Set when the step-5 lookup found no exact match and a fallback
        winner was used.
    """

    prize_id: str
    step: int
    pair: Optional[str] = None
    winner_id: Optional[int] = None
    auto_finished: bool = False
    warning: Optional[str] = None


@dataclass
class RoundState:
    """Everything a round mutates, owned by a single :class:`DrawEngine`."""

    participants: list[Participant] = field(default_factory=list)
    prizes: list[Prize] = field(default_factory=list)
    winners: dict[str, int] = field(default_factory=dict)
    active_index: int = 0
    reveal: RevealState = field(default_factory=RevealState)
    group_mode: bool = False
    group_index: int = 0
    board: Optional[GroupBoard] = None


CommandResult = Union[DrawOutcome, GroupTickResult, None]


class DrawEngine:
    """Synchronous state machine for a round of prize draws.

    Every public method applies one operator command completely before
    returning; the presentation layer only delays when results become
    visible.
    """

    COMMANDS = (
        "draw",
        "next_prize",
        "next_group",
        "prev_group",
        "undo_last_prize",
        "reset_round",
        "reset_group",
        "toggle_group_mode",
    )

    def __init__(
        self,
        seed: int,
        participants: Iterable[Participant] = (),
        prizes: Iterable[Prize] = (),
    ) -> None:
        """Create an engine bound to ``seed``.

        Parameters
        ----------
        seed : int
            Round seed; together with the data and the command sequence it
            fully determines every result.
        participants : Iterable[Participant]
            Validated roster. Duplicated phone keys are dropped, keeping
            the first occurrence.
        prizes : Iterable[Prize]
            Prizes in the order they are drawn.
        """

        if isinstance(seed, bool) or not isinstance(seed, int):
            raise ValueError("seed must be an integer")
        self.seed = seed
        self.state = RoundState()
        self.history: list[str] = []
        self._by_id: dict[int, Participant] = {}
        self.load(participants, prizes)

    # -------- round data --------
    def load(self, participants: Iterable[Participant], prizes: Iterable[Prize]) -> None:
        """Replace the roster and prize list, hard-resetting all draw state."""
        kept = dedupe_participants(list(participants))
        prize_list = list(prizes)
        seen: set[str] = set()
        for prize in prize_list:
            if prize.id in seen:
                raise ValueError(f"Duplicate prize id {prize.id!r}")
            seen.add(prize.id)

        self.state = RoundState(participants=kept, prizes=prize_list)
        self._by_id = {p.id: p for p in kept}
        self.history = []
        logger.debug(f"Loaded {len(kept)} participants and {len(prize_list)} prizes")
        self._settle()

    @property
    def participants(self) -> list[Participant]:
        return self.state.participants

    @property
    def prizes(self) -> list[Prize]:
        return self.state.prizes

    @property
    def winners(self) -> dict[str, int]:
        """Copy of the prize id to participant id assignments."""
        return dict(self.state.winners)

    @property
    def reveal(self) -> RevealState:
        return self.state.reveal

    @property
    def current_prize(self) -> Optional[Prize]:
        if not self.state.prizes:
            return None
        return self.state.prizes[self.state.active_index]

    def participant(self, participant_id: int) -> Participant:
        return self._by_id[participant_id]

    def winner_of(self, prize_id: str) -> Optional[Participant]:
        participant_id = self.state.winners.get(prize_id)
        if participant_id is None:
            return None
        return self._by_id[participant_id]

    def progress(self) -> tuple[int, int]:
        """Return ``(prizes with a winner, total prizes)``."""
        return len(self.state.winners), len(self.state.prizes)

    # -------- pools --------
    def eligible(self, prize: Prize) -> list[Participant]:
        """Tier-eligible participants that hold no assignment anywhere."""
        claimed = set(self.state.winners.values())
        return [
            p for p in self.state.participants if prize.accepts(p) and p.id not in claimed
        ]

    def eligible_count(self) -> int:
        prize = self.current_prize
        return len(self.eligible(prize)) if prize is not None else 0

    def remaining(self) -> list[Participant]:
        """Candidate pool of the active prize under its revealed prefix."""
        prize = self.current_prize
        if prize is None:
            return []
        reveal = self.state.reveal
        return [
            p for p in self.eligible(prize) if matches_prefix(p, reveal.pairs, reveal.step)
        ]

    def is_done(self, prize: Optional[Prize] = None) -> bool:
        prize = prize or self.current_prize
        if prize is None:
            return True
        if prize.id in self.state.winners:
            return True
        return prize is self.current_prize and self.state.reveal.complete

    # -------- sequential draw --------
    def draw(self, *, hold: bool = False) -> Optional[DrawOutcome]:
        """Reveal the next pair of the active prize.

        Parameters
        ----------
        hold : bool, default: False
            Mark the prize in flight so that further draws are ignored until
            :meth:`complete_display` is called.

        Returns
        -------
        Optional[DrawOutcome]
            The transition applied, or ``None`` when the draw was ignored
            (prize done, display in flight, or no prize loaded).

        Raises
        ------
        NoEligibleCandidatesError
            If the candidate pool is empty. The reveal state is unchanged.
        """

        prize = self.current_prize
        if prize is None:
            return None
        settled = self._settle()
        if settled is not None:
            return settled
        reveal = self.state.reveal
        if self.is_done(prize) or reveal.in_flight:
            logger.debug(f"Ignoring draw for prize {prize.id}")
            return None

        pool = self.remaining()
        rng = prf_stream(self.seed, prize.id, reveal.step + 1, reveal.pairs)
        pair = pick_weighted_pair(pool, reveal.step, rng, prize_id=prize.id)
        reveal.push(pair)
        reveal.in_flight = hold
        logger.debug(f"Prize {prize.id}: revealed {pair} at step {reveal.step}")

        outcome = DrawOutcome(prize_id=prize.id, step=reveal.step, pair=pair)
        if reveal.complete:
            self._finalize(prize, pool, outcome)
            return outcome

        settled = self._settle()
        if settled is not None:
            outcome.step = settled.step
            outcome.winner_id = settled.winner_id
            outcome.auto_finished = True
        return outcome

    def complete_display(self) -> None:
        """Release the in-flight guard set by ``draw(hold=True)``."""
        self.state.reveal.in_flight = False
        if self.state.board is not None:
            self.state.board.in_flight = False

    def _finalize(self, prize: Prize, pool: list[Participant], outcome: DrawOutcome) -> None:
        key = "".join(self.state.reveal.pairs)
        exact = [p for p in pool if p.phone_key == key]
        if exact:
            winner = exact[0]
        else:
            # pool is never empty here: the pair was picked from it.
            winner = pool[0]
            outcome.warning = (
                f"No participant matched {key} for prize {prize.id}; "
                f"falling back to participant {winner.id}"
            )
            logger.warning(outcome.warning)
        self._commit(prize.id, winner.id)
        outcome.winner_id = winner.id

    def _settle(self) -> Optional[DrawOutcome]:
        """Auto-finish the active prize when exactly one candidate remains."""
        prize = self.current_prize
        if prize is None or prize.id in self.state.winners:
            return None
        reveal = self.state.reveal
        if reveal.complete:
            return None
        pool = self.remaining()
        if len(pool) != 1:
            return None
        only = pool[0]
        reveal.fill(only.pairs)
        self._commit(prize.id, only.id)
        logger.debug(f"Prize {prize.id}: auto-finished with participant {only.id}")
        return DrawOutcome(
            prize_id=prize.id,
            step=reveal.step,
            winner_id=only.id,
            auto_finished=True,
        )

    def _commit(self, prize_id: str, participant_id: int) -> None:
        if participant_id in self.state.winners.values():
            raise RuntimeError(
                f"Participant {participant_id} already holds a prize"
            )
        self.state.winners[prize_id] = participant_id
        logger.info(f"Prize {prize_id} won by participant {participant_id}")

    # -------- progression --------
    def next_prize(self) -> Optional[DrawOutcome]:
        """Advance to the next prize (clamped at the last one)."""
        if not self.state.prizes:
            return None
        self.state.reveal.reset()
        self.state.active_index = min(self.state.active_index + 1, len(self.state.prizes) - 1)
        return self._settle()

    def undo_last_prize(self) -> Optional[DrawOutcome]:
        """Release the most recent winner and reset its reveal.

        When the active prize has no winner yet, the previous prize is
        undone instead. At the first prize with no winner this is a no-op.
        """

        if not self.state.prizes:
            return None
        index = self.state.active_index
        if self.state.prizes[index].id not in self.state.winners:
            if index == 0:
                return None
            index -= 1
        prize = self.state.prizes[index]
        released = self.state.winners.pop(prize.id, None)
        if released is not None:
            logger.info(f"Prize {prize.id}: released participant {released}")
        self.state.active_index = index
        self.state.reveal.reset()
        return self._settle()

    def reset_round(self) -> Optional[DrawOutcome]:
        """Clear the active prize's reveal; assignments are left in place."""
        self.state.reveal.reset()
        return self._settle()

    # -------- group mode --------
    @property
    def groups(self) -> list[str]:
        """Group names in order of first appearance in the prize list."""
        names: list[str] = []
        for prize in self.state.prizes:
            if prize.group not in names:
                names.append(prize.group)
        return names

    @property
    def current_group(self) -> Optional[str]:
        groups = self.groups
        if not groups:
            return None
        return groups[min(self.state.group_index, len(groups) - 1)]

    @property
    def board(self) -> Optional[GroupBoard]:
        return self.state.board

    def set_group_mode(self, enabled: bool) -> None:
        """Switch between sequential and group draws."""
        self.state.group_mode = enabled
        if enabled:
            self._rebuild_board()
        else:
            self.state.board = None
            self._settle()

    def select_group(self, name: str) -> None:
        groups = self.groups
        if name not in groups:
            raise ValueError(f"Unknown prize group {name!r}")
        self.state.group_index = groups.index(name)
        if self.state.group_mode:
            self._rebuild_board()

    def next_group(self) -> None:
        if not self.groups:
            return
        self.state.group_index = min(self.state.group_index + 1, len(self.groups) - 1)
        self._rebuild_board()

    def prev_group(self) -> None:
        if not self.groups:
            return
        self.state.group_index = max(self.state.group_index - 1, 0)
        self._rebuild_board()

    def draw_group(self, *, hold: bool = False) -> Optional[GroupTickResult]:
        """Advance every unfinished prize of the selected group by one pair."""
        board = self.state.board
        if board is None:
            return None
        return board.tick(self.seed, self.state.participants, self.state.winners, hold=hold)

    def reset_group(self) -> None:
        board = self.state.board
        if board is None:
            return
        board.reset()
        board.settle(self.state.participants, self.state.winners)

    def undo_group(self) -> None:
        """Release every winner of the selected group and reset its cards."""
        board = self.state.board
        if board is None:
            return
        current = self.current_prize
        for prize_id in board.cards:
            released = self.state.winners.pop(prize_id, None)
            if released is not None:
                logger.info(f"Prize {prize_id}: released participant {released}")
                if current is not None and current.id == prize_id:
                    self.state.reveal.reset()
        board.reset()
        board.settle(self.state.participants, self.state.winners)

    def _rebuild_board(self) -> None:
        group = self.current_group
        if group is None or not self.state.group_mode:
            self.state.board = None
            return
        board = self.state.board
        if board is None or board.group != group:
            board = GroupBoard(group)
        board.sync(self.state.prizes)
        self.state.board = board
        board.settle(self.state.participants, self.state.winners)

    # -------- command surface --------
    def apply(self, command: str, *, hold: bool = False) -> CommandResult:
        """Dispatch an operator command by name.

        In group mode ``draw``, ``next_prize``, ``reset_round`` and
        ``undo_last_prize`` act on the selected group. ``select_group:<name>``
        selects a group by name. ``hold`` is passed to draws (see :meth:`draw`).
        Draws that are ignored (prize done, display in flight) are not kept in
        :attr:`history`.
        """

        self.history.append(command)
        group_mode = self.state.group_mode
        if command.startswith("select_group:"):
            self.select_group(command.split(":", 1)[1])
            return None
        if command == "draw":
            result = self.draw_group(hold=hold) if group_mode else self.draw(hold=hold)
            if result is None:
                # Ignored draws changed nothing and must not run on replay.
                self.history.pop()
            return result
        if command == "next_prize":
            if group_mode:
                self.next_group()
                return None
            return self.next_prize()
        if command == "next_group":
            self.next_group()
            return None
        if command == "prev_group":
            self.prev_group()
            return None
        if command == "undo_last_prize":
            if group_mode:
                self.undo_group()
                return None
            return self.undo_last_prize()
        if command == "reset_round":
            if group_mode:
                self.reset_group()
                return None
            return self.reset_round()
        if command == "reset_group":
            self.reset_group()
            return None
        if command == "toggle_group_mode":
            self.set_group_mode(not group_mode)
            return None
        self.history.pop()
        raise ValueError(f"Unknown command {command!r}")


__all__ = ["CommandResult", "DrawEngine", "DrawOutcome", "RoundState"]
