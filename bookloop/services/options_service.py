"""Global picker options (genres, languages, authors)."""

import logging
from typing import Optional

from bookloop.domain.entities import Options, new_id
from bookloop.domain.repositories import IOptionsRepository

logger = logging.getLogger(__name__)

DEFAULT_GENRES = [
    "Fiction", "Non-Fiction", "Mystery", "Romance", "Fantasy", "Science Fiction",
    "Biography", "History", "Self-Help", "Business", "Psychology", "Philosophy",
    "Poetry", "Drama", "Adventure", "Horror", "Thriller", "Comedy", "Crime",
    "Historical Fiction", "Contemporary Fiction", "Young Adult", "Children",
    "Memoir", "Travel", "Health & Fitness", "Cooking", "Art", "Music", "Sports",
]
DEFAULT_LANGUAGES = [
    "English", "Spanish", "French", "German", "Italian", "Portuguese", "Russian",
    "Chinese", "Japanese", "Korean", "Arabic", "Hindi", "Bengali", "Urdu",
    "Dutch", "Swedish", "Norwegian", "Danish", "Finnish", "Polish", "Czech",
    "Hungarian", "Romanian", "Greek", "Turkish", "Hebrew", "Thai", "Vietnamese",
]
DEFAULT_AUTHORS = [
    "J.K. Rowling", "Stephen King", "Agatha Christie", "William Shakespeare",
    "Jane Austen", "Mark Twain", "Ernest Hemingway", "F. Scott Fitzgerald",
    "George Orwell", "Harper Lee", "J.R.R. Tolkien", "Dan Brown", "John Grisham",
    "Paulo Coelho", "Haruki Murakami", "Maya Angelou", "Toni Morrison",
    "Margaret Atwood", "Neil Gaiman", "Gillian Flynn", "Donna Tartt",
    "Khaled Hosseini", "Chimamanda Ngozi Adichie", "Yuval Noah Harari",
]


class OptionsService:

    def __init__(self, options_repository: IOptionsRepository):
        self.options_repository = options_repository

    async def get_options(self) -> Options:
        """Return the singleton, creating an empty one on first access."""
        options = await self.options_repository.get()
        if options is None:
            options = await self.options_repository.save(Options(id=new_id()))
        return options

    async def upsert_options(
        self,
        genres: Optional[list[str]] = None,
        languages: Optional[list[str]] = None,
        authors: Optional[list[str]] = None,
    ) -> tuple[Options, bool]:
        """Overwrite the supplied lists; returns ``(options, created)``."""
        existing = await self.options_repository.get()
        created = existing is None
        options = existing or Options(id=new_id())
        if genres is not None:
            options.genres = genres
        if languages is not None:
            options.languages = languages
        if authors is not None:
            options.authors = authors
        return await self.options_repository.save(options), created

    async def seed_defaults(self) -> bool:
        """Populate the default lists when no options exist yet."""
        if await self.options_repository.get() is not None:
            return False
        await self.options_repository.save(
            Options(
                id=new_id(),
                genres=list(DEFAULT_GENRES),
                languages=list(DEFAULT_LANGUAGES),
                authors=list(DEFAULT_AUTHORS),
            )
        )
        logger.info("Seeded default options")
        return True
