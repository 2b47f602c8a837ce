"""Advisory completeness check for markdown reading content."""
import re

EXPECTED_SECTIONS = {
    "summary": ["Scope Map", "Quick Reference", "TL;DR", "Self-Check"],
    "explainer": ["Big Picture", "Step-by-Step", "Worked Example", "Common Pitfalls", "Self-Check"],
    "practice": ["Warm-Up", "Core Problems", "Challenge", "Solutions"],
    "review": ["Key Takeaways", "Connections", "Mistakes to Avoid", "Self-Test"],
}

SUBHEADING = re.compile(r"^\s{0,3}#{2,4}\s+(.+?)\s*#*\s*$", re.MULTILINE)
MAX_LISTED = 3


def headings(markdown: str) -> list[str]:
    return [m.group(1).strip() for m in SUBHEADING.finditer(markdown or "")]


def missing_sections(markdown: str, content_type: str) -> list[str]:
    """Expected section names not found among the ``##``-``####`` headings.

    A section counts as present when its phrase appears, case-insensitively,
    anywhere in a heading. Practice content also needs at least one literal
    ``Solution:`` line. Unknown types expect nothing.
    """
    found = [h.lower() for h in headings(markdown)]
    missing = [
        phrase for phrase in EXPECTED_SECTIONS.get(content_type, [])
        if not any(phrase.lower() in h for h in found)
    ]
    if content_type == "practice" and (markdown or "").count("Solution:") == 0:
        missing.append("Solution: entries")
    return missing


def format_warning(missing: list[str]) -> str | None:
    if not missing:
        return None
    shown = ", ".join(missing[:MAX_LISTED])
    extra = len(missing) - MAX_LISTED
    if extra > 0:
        shown += f" +{extra} more"
    return f"Missing sections: {shown}"
