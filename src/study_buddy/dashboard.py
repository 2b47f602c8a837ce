"""Progress statistics across all courses."""
from datetime import date

from study_buddy.flashcards import count_due
from study_buddy.models import Data


def get_mastery_label(score: float) -> str:
    if score >= 80:
        return "MASTERED"
    elif score >= 70:
        return "PROFICIENT"
    elif score >= 50:
        return "NEEDS WORK"
    return "STRUGGLING"


def get_mastery_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 70:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def _all_topics(data: Data):
    for course in data.courses:
        for topic in course.topics:
            yield course, topic


def get_study_stats(data: Data, today: date | None = None) -> dict:
    topics = [t for _, t in _all_topics(data)]
    slots = [s for t in topics for s in t.slots.values()]
    quiz_slots = [t.slots["quiz"] for t in topics if t.slots["quiz"].attempts]
    avg_best = (
        round(sum(s.best_score for s in quiz_slots) / len(quiz_slots), 1)
        if quiz_slots else 0.0
    )
    return {
        "courses": len(data.courses),
        "topics": len(topics),
        "filled_slots": sum(1 for s in slots if s.is_filled),
        "completed_slots": sum(1 for s in slots if s.completed),
        "quiz_attempts": sum(len(s.attempts) for s in quiz_slots),
        "avg_best_quiz": avg_best,
        "cards_due": sum(count_due(t.slots["flashcards"], today) for t in topics),
    }


def get_topic_scores(data: Data) -> list[dict]:
    """Best quiz score per topic that has been attempted, weakest first."""
    results = []
    for course, topic in _all_topics(data):
        quiz = topic.slots["quiz"]
        if not quiz.attempts:
            continue
        results.append({
            "course": course.name,
            "topic": topic.name,
            "best_score": quiz.best_score,
            "attempts": len(quiz.attempts),
            "label": get_mastery_label(quiz.best_score),
        })
    results.sort(key=lambda r: r["best_score"])
    return results


def recent_courses(data: Data, limit: int = 3) -> list:
    return list(reversed(data.courses[-limit:]))
