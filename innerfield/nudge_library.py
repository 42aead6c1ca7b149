"""
Inner — Nudge Library
Reflective lines keyed by intention and stage. Pure data.

Stages, in order of elapsed time inside one intention state:
  acknowledge (3+ days) → reflect (7+ days) → invite (14+ days)
"""

INTENTIONS = (
    "calm",
    "clarity",
    "grounding",
    "healing",
    "reawakening",
    "expansion",
)
MIXED = "mixed"
ALL_INTENTIONS = INTENTIONS + (MIXED,)

ACKNOWLEDGE = "acknowledge"
REFLECT = "reflect"
INVITE = "invite"
ALL_STAGES = (ACKNOWLEDGE, REFLECT, INVITE)

NUDGE_LIBRARY: dict[str, dict[str, list[str]]] = {
    "calm": {
        ACKNOWLEDGE: [
            "Calm has been steady lately.",
            "Stillness has been your dominant tone.",
        ],
        REFLECT: [
            "You’ve been resting in Calm for a while now.",
            "The noise has stayed quiet longer than usual.",
        ],
        INVITE: [
            "When stillness holds long enough, clarity sometimes follows.",
            "Calm often becomes the ground from which something sharper can emerge.",
        ],
    },
    "clarity": {
        ACKNOWLEDGE: [
            "Clarity has been present recently.",
            "Your inner lens has been focused.",
        ],
        REFLECT: [
            "You’ve been moving with Clarity for some time.",
            "Patterns may be easier to see right now.",
        ],
        INVITE: [
            "After clarity comes grounding, if you feel the need to root what you see.",
            "Some choose to return to Calm once vision sharpens.",
        ],
    },
    "grounding": {
        ACKNOWLEDGE: [
            "Grounding has been consistent.",
            "You’ve stayed close to the present.",
        ],
        REFLECT: [
            "You’ve been rooted here for a while now.",
            "Stability has been doing quiet work.",
        ],
        INVITE: [
            "From strong roots, expansion becomes safer.",
            "Grounding sometimes prepares the way for reawakening.",
        ],
    },
    "healing": {
        ACKNOWLEDGE: [
            "Healing has been active.",
            "Restoration has been a recurring theme.",
        ],
        REFLECT: [
            "You’ve been tending unseen spaces for some time.",
            "Soft repair has been ongoing.",
        ],
        INVITE: [
            "When healing settles, grounding can help integrate what’s changed.",
            "Some find reawakening follows long periods of repair.",
        ],
    },
    "reawakening": {
        ACKNOWLEDGE: [
            "Reawakening energy has been present.",
            "Something has been stirring.",
        ],
        REFLECT: [
            "You’ve been in a state of reawakening for a while.",
            "Momentum has been quietly building.",
        ],
        INVITE: [
            "After reawakening, clarity can help shape what’s returning.",
            "Expansion often follows renewed energy.",
        ],
    },
    "expansion": {
        ACKNOWLEDGE: [
            "Expansion has been your prevailing tone.",
            "Openness has been active.",
        ],
        REFLECT: [
            "You’ve been exploring wider inner space.",
            "Growth has been unfolding steadily.",
        ],
        INVITE: [
            "After expansion, grounding can help anchor what’s grown.",
            "Some return to Calm to let integration catch up.",
        ],
    },
    MIXED: {
        ACKNOWLEDGE: [
            "Your inner field has been balanced between tones.",
            "Multiple intentions have been shaping your experience.",
        ],
        REFLECT: [
            "You’ve been holding more than one state at once.",
            "This balance has been consistent.",
        ],
        INVITE: [
            "You don’t need to change anything. Just notice.",
            "When one tone asks for more space, you’ll feel it.",
        ],
    },
}


def candidates(intention: str, stage: str) -> list[str]:
    """Lines for (intention, stage); empty when either is unknown."""
    return NUDGE_LIBRARY.get(intention, {}).get(stage, [])
