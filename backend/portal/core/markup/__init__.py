from .tokenizer import extract_hashtags, tokenize, tokenize_inline, visible_text

__all__ = [
    "extract_hashtags",
    "tokenize",
    "tokenize_inline",
    "visible_text",
]
