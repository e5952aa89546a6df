"""
Command-line interface for reviewing flashcards.
"""

import logging

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from vaultcards.models import Card, Rating, StudySettings
from vaultcards.review_manager import ReviewSessionManager

logger = logging.getLogger(__name__)
console = Console()

# Rating label colors for dark and light terminal themes.
_RATING_STYLES = {
    True: {Rating.Hard: "bold red", Rating.Good: "bold green", Rating.Easy: "bold cyan"},
    False: {Rating.Hard: "red", Rating.Good: "dark_green", Rating.Easy: "blue"},
}


def _render(text: str, settings: StudySettings):
    """Markdown renderable when enabled, otherwise the raw text."""
    if settings.enable_markdown_rendering:
        return Markdown(text)
    return text


def _source_line(card: Card) -> str:
    line = f"Source: {card.source_file}"
    if card.review_count:
        line += (
            f"\nReviews: {card.review_count} | "
            f"Ease: {card.ease_factor:.2f} | "
            f"Interval: {card.interval} days"
        )
    return line


def _rating_prompt(settings: StudySettings) -> str:
    styles = _RATING_STYLES[settings.dark_mode_buttons]
    labels = [
        f"[{styles[rating]}]{int(rating)}:{rating.name}[/{styles[rating]}]"
        for rating in Rating
    ]
    return f"[bold]How well did you know this? ({', '.join(labels)}): [/bold]"


def _get_user_rating(settings: StudySettings) -> int:
    """
    Prompt until the user enters a rating between 1 and 3.

    Returns:
        int: 1=Hard, 2=Good, 3=Easy.
    """
    prompt = _rating_prompt(settings)
    while True:
        try:
            rating = int(console.input(prompt))
            if 1 <= rating <= 3:
                return rating
            console.print(
                "[bold red]Invalid rating. Please enter a number between 1 and 3.[/bold red]"
            )
        except (ValueError, TypeError):
            console.print(
                "[bold red]Invalid input. Please enter a number.[/bold red]"
            )


def _display_card(card: Card, settings: StudySettings) -> None:
    """
    Show a card's front, wait for Enter, then reveal the back.
    """
    if settings.show_source_file:
        console.print(f"[dim]{_source_line(card)}[/dim]")
    console.print(
        Panel(_render(card.front, settings), title="Question", border_style="green")
    )
    console.input("[italic]Press Enter to show the answer...[/italic]")
    console.print(
        Panel(_render(card.back, settings), title="Answer", border_style="blue")
    )


def start_review_flow(manager: ReviewSessionManager) -> int:
    """
    Run the interactive loop over an initialized session.

    A card whose review cannot be saved is skipped and the session continues.

    Returns:
        int: Number of cards successfully reviewed.
    """
    settings = manager.settings or StudySettings()
    total = manager.session_size
    position = 0
    reviewed = 0

    while (card := manager.get_next_card()) is not None:
        position += 1
        console.rule(f"[bold]Card {position}/{total}[/bold]")

        _display_card(card, settings)
        rating = _get_user_rating(settings)

        try:
            updated_card = manager.submit_review(card_id=card.id, rating=rating)
        except Exception as e:
            logger.error(f"Failed to submit review for {card.id}: {e}")
            console.print(
                "[bold red]Error saving review. Card will be reviewed again later.[/bold red]"
            )
            manager.skip_card(card.id)
            continue

        reviewed += 1
        if updated_card.next_review is not None:
            due_str = updated_card.next_review.astimezone().strftime("%Y-%m-%d")
            console.print(
                f"[green]Reviewed.[/green] Next review in "
                f"[bold]{updated_card.interval} days[/bold] on {due_str}."
            )
        else:
            console.print("[green]Reviewed.[/green]")
        console.print("")

    stats = manager.get_session_stats()
    console.print("[bold cyan]Review session complete![/bold cyan]")
    console.print(
        f"Rated {reviewed} of {stats['total_cards']} cards"
        f" ({stats['reviewed_cards'] - reviewed} skipped)."
    )
    return reviewed
