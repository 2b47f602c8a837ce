# tests/test_prompts.py
from study_buddy.extract import extract_json_from_text
from study_buddy.models import PersonalizationPrefs, Topic
from study_buddy.prompts import content_prompt, structure_prompt

TOPIC = Topic(id="t1", name="Cells", difficulty="Beginner")


def test_structure_prompt_names_every_marker():
    prompt = structure_prompt()
    for marker in ("COURSE_STRUCTURE_START", "TOPIC_START", "SUBTOPIC", "DIFFICULTY", "CATEGORY", "CONCEPTS"):
        assert marker in prompt


def test_quiz_prompt_embeds_parseable_template():
    prompt = content_prompt("quiz", "Biology", TOPIC)
    assert "Biology • Cells" in prompt
    doc = extract_json_from_text(prompt)
    assert doc["schema_version"] == "quiz_mcq_v1"
    assert doc["topic_id"] == "t1"
    options = doc["items"][0]["options"]
    assert len(options) == 4
    assert sum(o["isCorrect"] for o in options) == 1


def test_flashcards_prompt_uses_preferred_count():
    prompt = content_prompt("flashcards", "Biology", TOPIC, PersonalizationPrefs(flashcards_count=25))
    assert "Create 25" in prompt
    doc = extract_json_from_text(prompt)
    assert doc["schema_version"] == "flashcards_v1"
    assert doc["total"] == 25


def test_reading_prompt_lists_expected_headings():
    prompt = content_prompt("practice", "Biology", TOPIC, PersonalizationPrefs(read_time=20))
    assert "## Warm-Up" in prompt
    assert "## Solutions" in prompt
    assert "Solution:" in prompt
    assert "read_time=20min" in prompt
    assert "not JSON" in prompt
    assert extract_json_from_text(prompt) is None

