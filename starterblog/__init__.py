"""StarterBlog API: authors, posts and thumbnail uploads."""

__version__ = "1.0.0"
