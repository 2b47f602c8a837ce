"""Interactive CLI application."""
from datetime import date

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from study_buddy.db import DEFAULT_DB_PATH, SqliteStore
from study_buddy.dashboard import (
    get_mastery_color, get_mastery_label, get_study_stats, get_topic_scores, recent_courses,
)
from study_buddy.errors import StudyBuddyError
from study_buddy.flashcards import FlashcardSession
from study_buddy.importer import clear_all_data, default_export_name, export_data, import_data
from study_buddy.library import (
    add_course, apply_structure, delete_content, delete_course, edit_source, save_content,
    set_completed,
)
from study_buddy.log import setup_logging
from study_buddy.models import CONTENT_TYPES, MarkdownContent, QuizContent, ReadingContent
from study_buddy.prompts import content_prompt, structure_prompt
from study_buddy.quiz import QuizSession
from study_buddy.reading import format_warning
from study_buddy.settings import KEYS, load_prefs, prefs_to_dict, update_pref
from study_buddy.sm2 import GRADES
from study_buddy.study import build_study_queue

console = Console()

EXIT_WORDS = ("q", "menu")
PASTE_END = "END"


class SessionExitRequested(Exception):
    """User typed q/menu inside a quiz or flashcard session."""


def session_prompt(prompt: str, **kwargs) -> str:
    if kwargs.get("choices"):
        kwargs["choices"] = list(kwargs["choices"]) + list(EXIT_WORDS)
        kwargs.setdefault("show_choices", False)
    answer = Prompt.ask(prompt, **kwargs)
    if (answer or "").strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list) -> int:
    return int(session_prompt(prompt, choices=choices))


def read_pasted(label: str) -> str:
    console.print(f"[dim]Paste the {label}, then type {PASTE_END} on its own line.[/dim]")
    lines = []
    while True:
        try:
            line = console.input()
        except EOFError:
            break
        if line.strip() == PASTE_END:
            break
        lines.append(line)
    return "\n".join(lines)


def show_welcome():
    console.print(Panel(
        "[bold]Study Buddy[/bold]\n[dim]Courses, quizzes and spaced repetition[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("study", "Smart study queue"),
        ("courses", "List courses"),
        ("add", "Create a course"),
        ("open", "Open a course"),
        ("dashboard", "Progress overview"),
        ("settings", "Personalization"),
        ("prompts", "Show the structure prompt"),
        ("export", "Back up all data"),
        ("import", "Restore from a backup"),
        ("clear", "Delete all data"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def pick(items: list, label: str, describe):
    if not items:
        return None
    for i, item in enumerate(items, 1):
        console.print(f"  [cyan]{i}[/cyan]) {describe(item)}")
    choice = Prompt.ask(f"Select {label}", choices=[str(i) for i in range(1, len(items) + 1)])
    return items[int(choice) - 1]


def run_flashcard_session(store, data, slot) -> int:
    session = FlashcardSession(slot)
    console.print(f"\n[bold]Flashcard Session[/bold] - {len(session.queue)} cards (q to stop)\n")
    try:
        while not session.finished:
            card = session.current()
            console.print(Panel(card.front, title=f"{session.remaining} left", border_style="cyan"))
            session_prompt("[dim]Press Enter to reveal answer[/dim]", default="", show_default=False)
            console.print(Panel(card.back, border_style="green"))
            rating = session_int_prompt(
                "Rate yourself (1=again, 3=hard, 4=good, 5=easy)", choices=[str(g) for g in GRADES],
            )
            state = session.grade(rating)
            store.save(data)
            when = "again this session" if state.interval == 0 else f"in {state.interval} day(s)"
            console.print(f"[dim]Next review {when}[/dim]\n")
    except SessionExitRequested:
        console.print("[dim]Session stopped. Grades so far are saved.[/dim]")
    return session.reviewed


def run_quiz_session(store, data, slot) -> None:
    quiz = QuizSession(slot)
    quiz.start()
    total = len(quiz.questions)
    console.print(f"\n[bold]Quiz[/bold] - {total} questions (p=previous, q=quit)\n")
    try:
        while True:
            q = quiz.current_question
            console.print(f"[bold]Q{quiz.index + 1}/{total}.[/bold] {q.text}\n")
            for i, opt in enumerate(q.options):
                console.print(f"  [cyan]{chr(97 + i)})[/cyan] {opt}")
            if quiz.is_locked():
                console.print(f"[dim]Answered: {chr(97 + quiz.answers[quiz.index])}[/dim]")
                answer = session_prompt("\nn=next, p=previous", choices=["n", "p"], default="n")
            else:
                answer = session_prompt("\nYour answer", choices=["a", "b", "c", "d", "p"])
                if answer != "p":
                    feedback = quiz.submit(ord(answer) - 97)
                    color = "green" if feedback.is_correct else "red"
                    console.print(f"[{color}]{feedback.message}[/{color}]\n")
                    answer = "n"
            if answer == "p":
                quiz.retreat()
                continue
            attempt = quiz.advance()
            if attempt is not None:
                break
    except SessionExitRequested:
        console.print("[dim]Quiz abandoned; nothing was recorded.[/dim]")
        return
    store.save(data)
    mm, ss = divmod(attempt.time_spent, 60)
    console.print(
        f"[bold]Score: {attempt.score}/{attempt.total} ({attempt.percentage}%)[/bold]  "
        f"Time: {mm}:{ss:02d}  Best: {slot.best_score}%"
    )
    if slot.completed:
        console.print("[green]Topic quiz mastered![/green]")
    if Confirm.ask("Review your answers?", default=False):
        for row in quiz.review():
            mark = "[green]✓[/green]" if row.is_correct else "[red]✗[/red]"
            chosen = chr(97 + row.selected) if row.selected is not None else "-"
            console.print(
                f"{mark} {row.number}. {row.question.text}  "
                f"[dim](you: {chosen}, answer: {chr(97 + row.question.correct_answer)})[/dim]"
            )


def show_content(slot) -> None:
    content = slot.content
    if isinstance(content, MarkdownContent):
        console.print(Markdown(content.markdown))
    elif isinstance(content, ReadingContent):
        if content.rendered_markdown or not content.sections:
            console.print(Markdown(content.rendered_markdown or content.content))
        else:
            for section in content.sections:
                console.print(Markdown(f"## {section.title}\n{section.body_markdown}"))
    elif isinstance(content, QuizContent):
        console.print(f"[bold]Quiz[/bold]: {content.total_questions} questions, "
                      f"{len(slot.attempts)} attempt(s), best {slot.best_score}%")
    else:
        console.print(f"[bold]Flashcards[/bold]: {content.total_cards} cards")


def fill_slot(store, data, course, topic, content_type, prefs) -> None:
    console.print(Panel(content_prompt(content_type, course.name, topic, prefs),
                        title=f"{content_type.capitalize()} Prompt"))
    response = read_pasted("AI response")
    missing = save_content(store, data, course.id, topic.id, content_type, response)
    console.print("[green]Content saved successfully![/green]")
    warning = format_warning(missing)
    if warning:
        console.print(f"[yellow]{warning}[/yellow]")


def cmd_slot(store, data, course, topic, content_type, prefs) -> None:
    slot = topic.slots[content_type]
    if not slot.is_filled:
        fill_slot(store, data, course, topic, content_type, prefs)
        return
    show_content(slot)
    actions = ["back", "edit", "delete", "complete"]
    if content_type == "quiz":
        actions.insert(0, "take")
    if content_type == "flashcards":
        actions.insert(0, "review")
    action = Prompt.ask("Action", choices=actions, default=actions[0])
    if action == "take":
        run_quiz_session(store, data, slot)
    elif action == "review":
        reviewed = run_flashcard_session(store, data, slot)
        console.print(f"[green]Reviewed {reviewed} card(s).[/green]")
    elif action == "edit":
        console.print(Panel(edit_source(data, course.id, topic.id, content_type) or "", title="Current response"))
        fill_slot(store, data, course, topic, content_type, prefs)
    elif action == "delete" and Confirm.ask("Delete this content?", default=False):
        delete_content(store, data, course.id, topic.id, content_type)
        console.print("[green]Content deleted.[/green]")
    elif action == "complete":
        set_completed(store, data, course.id, topic.id, content_type, not slot.completed)
        console.print(f"[green]Marked {'completed' if slot.completed else 'not completed'}.[/green]")


def show_topic(topic) -> None:
    table = Table(title=f"{topic.name} ({topic.difficulty}, {topic.category})")
    table.add_column("#", justify="right")
    table.add_column("Content")
    table.add_column("Status")
    for i, content_type in enumerate(CONTENT_TYPES, 1):
        slot = topic.slots[content_type]
        status = "[green]completed[/green]" if slot.completed else ("ready" if slot.is_filled else "[dim]empty[/dim]")
        table.add_row(str(i), content_type.capitalize(), status)
    console.print(table)
    for sub in topic.subtopics:
        console.print(f"  [dim]• {sub.name}: {', '.join(sub.concepts)}[/dim]")


def cmd_open(store, data, prefs, course=None, topic_id=None, content_type=None):
    course = course or pick(data.courses, "course", lambda c: f"{c.name} ({len(c.topics)} topics)")
    if course is None:
        console.print("[yellow]No courses yet. Use 'add' to create one.[/yellow]")
        return
    if not course.structure_analyzed:
        console.print(Panel(structure_prompt(), title="Course Structure Analyzer"))
        response = read_pasted("structure response")
        topics = apply_structure(store, data, course.id, response)
        console.print(f"[green]Course structure created: {len(topics)} topics.[/green]")
    topic = next((t for t in course.topics if t.id == topic_id), None)
    topic = topic or pick(course.topics, "topic", lambda t: t.name)
    if topic is None:
        return
    if content_type is None:
        show_topic(topic)
        choice = Prompt.ask("Select content", choices=[str(i) for i in range(1, len(CONTENT_TYPES) + 1)])
        content_type = CONTENT_TYPES[int(choice) - 1]
    cmd_slot(store, data, course, topic, content_type, prefs)


def cmd_study(store, data, prefs):
    queue = build_study_queue(data)
    if queue.nothing_to_do:
        console.print("[yellow]No items in your queue yet. Add courses and generate content to begin.[/yellow]")
        return
    for i, item in enumerate(queue.items, 1):
        kind = f"Spaced repetition ({item.due_cards} due)" if item.kind == "review" else "Create content"
        console.print(f"  [cyan]{i}[/cyan]) {item.label} [dim]{kind}[/dim]")
    choice = Prompt.ask("Go to", choices=[str(i) for i in range(1, len(queue.items) + 1)] + ["back"], default="1")
    if choice == "back":
        return
    item = queue.items[int(choice) - 1]
    course = next(c for c in data.courses if c.id == item.course_id)
    cmd_open(store, data, prefs, course=course, topic_id=item.topic_id, content_type=item.content_type)


def cmd_courses(store, data):
    if not data.courses:
        console.print("[yellow]No courses yet. Create your first course to get started![/yellow]")
        return
    table = Table(title="My Courses")
    table.add_column("Course", style="cyan")
    table.add_column("Topics", justify="right")
    table.add_column("Description")
    for course in data.courses:
        table.add_row(course.name, str(len(course.topics)), course.description)
    console.print(table)
    if Confirm.ask("Delete a course?", default=False):
        course = pick(data.courses, "course", lambda c: c.name)
        if Confirm.ask(f"Delete {course.name} and all its topics?", default=False):
            delete_course(store, data, course.id)
            console.print("[green]Course deleted.[/green]")


def cmd_add(store, data):
    name = Prompt.ask("Course name")
    description = Prompt.ask("Description", default="")
    course = add_course(store, data, name, description)
    console.print(f"[green]Course created: {course.name}[/green]")


def cmd_dashboard(data):
    stats = get_study_stats(data, date.today())
    console.print(Panel(
        f"Courses: [bold]{stats['courses']}[/bold]  |  Topics: [bold]{stats['topics']}[/bold]  |  "
        f"Content: [bold]{stats['filled_slots']}[/bold] ({stats['completed_slots']} completed)  |  "
        f"Cards due: [bold]{stats['cards_due']}[/bold]",
        title="Study Buddy Dashboard", border_style="blue",
    ))
    scores = get_topic_scores(data)
    if scores:
        table = Table(title="Quiz Mastery")
        table.add_column("Topic", style="cyan")
        table.add_column("Best", justify="right")
        table.add_column("Status")
        for s in scores:
            color = get_mastery_color(s["best_score"])
            table.add_row(f"{s['course']} • {s['topic']}", f"{s['best_score']}%", f"[{color}]{s['label']}[/{color}]")
        console.print(table)
        avg = stats["avg_best_quiz"]
        console.print(f"\n  Avg best quiz: [bold]{avg}%[/bold] [{get_mastery_color(avg)}]{get_mastery_label(avg)}[/]")
    for course in recent_courses(data):
        console.print(f"  [dim]Recent: {course.name} ({len(course.topics)} topics)[/dim]")


def cmd_settings(db_path, prefs):
    for key, value in prefs_to_dict(prefs).items():
        console.print(f"  [cyan]{key:<16}[/cyan] {value}")
    key = Prompt.ask("Preference to change", choices=list(KEYS.values()) + ["back"], default="back")
    if key == "back":
        return
    update_pref(db_path, prefs, key, Prompt.ask("New value"))
    console.print("[green]Preference saved.[/green]")


def main():
    db_path = DEFAULT_DB_PATH
    setup_logging(console=console)
    store = SqliteStore(db_path)
    data = store.load_or_default()
    prefs = load_prefs(db_path)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="study").strip().lower()
        try:
            if choice == "study":
                cmd_study(store, data, prefs)
            elif choice == "courses":
                cmd_courses(store, data)
            elif choice == "add":
                cmd_add(store, data)
            elif choice == "open":
                cmd_open(store, data, prefs)
            elif choice == "dashboard":
                cmd_dashboard(data)
            elif choice == "settings":
                cmd_settings(db_path, prefs)
            elif choice == "prompts":
                console.print(Panel(structure_prompt(), title="Course Structure Analyzer"))
            elif choice == "export":
                path = Prompt.ask("Export to", default=default_export_name())
                result = export_data(data, prefs, path)
                console.print(f"[green]Exported {result['courses']} course(s) to {result['filename']}[/green]")
            elif choice == "import":
                path = Prompt.ask("File path")
                if Confirm.ask("This will replace all current data. Continue?", default=False):
                    data, imported_prefs = import_data(store, path)
                    prefs = imported_prefs or prefs
                    console.print("[green]Data imported successfully![/green]")
            elif choice == "clear":
                if Confirm.ask("This will permanently delete all your data. Continue?", default=False):
                    data = clear_all_data(store)
                    console.print("[green]All data cleared.[/green]")
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Happy studying![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except (StudyBuddyError, OSError) as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
