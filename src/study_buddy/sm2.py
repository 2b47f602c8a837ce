"""SM-2 derived spaced repetition update."""
from study_buddy.models import round_half_up

MIN_EASE = 1.3
GRADES = {1: "Again", 3: "Hard", 4: "Good", 5: "Easy"}


def sm2_update(
    quality: int,
    repetitions: int,
    ease_factor: float,
    interval: int,
) -> dict:
    """Calculate next review parameters.

    Args:
        quality: Grade 1 (again), 3 (hard), 4 (good) or 5 (easy)
        repetitions: Number of consecutive successful reviews
        ease_factor: Current ease factor (minimum 1.3)
        interval: Current interval in days

    Returns:
        Dict with updated interval, repetitions, ease_factor.
    """
    if quality < 3:
        # Again: due again today, ease untouched
        return {"interval": 0, "repetitions": 0, "ease_factor": ease_factor}

    if repetitions == 0:
        new_interval = 1
    elif repetitions == 1:
        new_interval = 6
    else:
        new_interval = round_half_up(interval * ease_factor)

    new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    new_ef = max(MIN_EASE, new_ef)

    return {
        "interval": new_interval,
        "repetitions": repetitions + 1,
        "ease_factor": round(new_ef, 2),
    }
