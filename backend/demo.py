"""Create demo data for development/testing."""

from aips.models import Chapter, Character, Story, User
from aips.storage import Storage

DEMO_USER = User(
    id="demo",
    username="demo",
    email="demo@example.com",
    first_name="Ada",
    last_name="Writer",
)

DEMO_STORY = {
    "title": "The Clockwork Orchard",
    "description": "In a valley where the fruit trees tick, an apprentice "
    "horologist discovers the orchard is counting down to something.",
    "genre": "Fantasy",
    "location": "Ticking Vale",
    "characters": [
        Character(name="Mira", description="Apprentice horologist, stubborn and curious."),
        Character(name="Old Fenwick", description="The orchard keeper. Knows more than he says."),
    ],
    "chapters": [
        Chapter(
            title="Prologue",
            content="Every tree in the vale ticked, and had ticked for as long "
            "as anyone could remember.",
        ),
        Chapter(
            title="Chapter 1",
            content="Mira pressed her ear to the bark and counted. The rhythm "
            "had changed overnight.",
        ),
    ],
}


def create_demo_data(storage: Storage) -> Story:
    """Wipe all documents and create a demo user with one story."""
    storage.wipe()
    storage.save_user(DEMO_USER)
    return storage.create_story(
        DEMO_USER.id, author=DEMO_USER.full_name, **DEMO_STORY
    )
