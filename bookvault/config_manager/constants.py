"""Configuration defaults."""

DEFAULT_DATABASE_URL = "sqlite:///bookvault.db"
DEFAULT_GOOGLE_BOOKS_TIMEOUT_SECONDS = 10.0

# Shipped in sample .env files; never sent to Google as a real key.
GOOGLE_BOOKS_API_KEY_PLACEHOLDER = "your-google-books-api-key"
