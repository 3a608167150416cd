"""Finance chart chat API."""
