"""Deterministic digit-pair draw engine."""

from .engine import CommandResult, DrawEngine, DrawOutcome, RoundState
from .export import build_results_document, write_results_json
from .group import CardAdvance, GroupBoard, GroupCard, GroupTickResult
from .phone import mask_phone, normalize_phone, phone_to_pairs
from .prf import derive_prf_key, fnv1a_32, mulberry32, prf_stream, rng_int_unbiased
from .records import TIERS, Participant, Prize, dedupe_participants
from .reveal import PAIR_COUNT, PLACEHOLDER, RevealState
from .selection import NoEligibleCandidatesError, count_pairs, pick_weighted_pair

__all__ = [
    "CardAdvance",
    "CommandResult",
    "DrawEngine",
    "DrawOutcome",
    "GroupBoard",
    "GroupCard",
    "GroupTickResult",
    "NoEligibleCandidatesError",
    "PAIR_COUNT",
    "PLACEHOLDER",
    "Participant",
    "Prize",
    "RevealState",
    "RoundState",
    "TIERS",
    "build_results_document",
    "count_pairs",
    "dedupe_participants",
    "derive_prf_key",
    "fnv1a_32",
    "mask_phone",
    "mulberry32",
    "normalize_phone",
    "phone_to_pairs",
    "pick_weighted_pair",
    "prf_stream",
    "rng_int_unbiased",
    "write_results_json",
]
