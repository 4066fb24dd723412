"""Generator adapters and verbatim-answer prompts."""
