"""debugkit: tooling around a Supabase project and its ``products`` table."""

__version__ = "1.0.0"
