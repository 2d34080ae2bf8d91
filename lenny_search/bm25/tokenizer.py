"""
Tokenizer for BM25 text processing.

Tokenization pipeline:
1. Lowercase conversion
2. Replace anything that is not a letter, digit, apostrophe, hyphen or
   whitespace with a space (punctuation never glues two words together)
3. Split on whitespace
4. Drop single-character tokens
5. Drop stopwords (English function words + spoken-transcript fillers)

No stemming: documents and queries match on the exact normalized token.
The same function is used at index time and at query time, so stopword
removal is always symmetric.
"""

import re
from typing import List

# Most frequent English function words plus filler words that dominate
# speech-derived text ("yeah", "um", "basically", ...)
STOPWORDS = frozenset([
    'the', 'be', 'to', 'of', 'and', 'a', 'in', 'that', 'have', 'i',
    'it', 'for', 'not', 'on', 'with', 'he', 'as', 'you', 'do', 'at',
    'this', 'but', 'his', 'by', 'from', 'they', 'we', 'say', 'her', 'she',
    'or', 'an', 'will', 'my', 'one', 'all', 'would', 'there', 'their',
    'what', 'so', 'up', 'out', 'if', 'about', 'who', 'get', 'which',
    'go', 'me', 'when', 'make', 'can', 'like', 'time', 'no', 'just',
    'him', 'know', 'take', 'people', 'into', 'year', 'your', 'good',
    'some', 'could', 'them', 'see', 'other', 'than', 'then', 'now',
    'look', 'only', 'come', 'its', 'over', 'think', 'also', 'back',
    'after', 'use', 'two', 'how', 'our', 'work', 'first', 'well',
    'way', 'even', 'new', 'want', 'because', 'any', 'these', 'give',
    'day', 'most', 'us', 'was', 'is', 'are', 'been', 'has', 'had',
    'did', 'were', 'said', 'does', 'being', 'am',
    # Podcast filler
    'yeah', 'right', 'okay', 'um', 'uh', 'really', 'actually',
    'basically', 'literally', 'gonna', 'wanna', 'thing', 'things',
    'lot', 'kind', 'sort', 'stuff', 'much', 'very', 'got', 'going',
])

_NON_TOKEN_CHARS = re.compile(r"[^a-z0-9\s'-]")


def tokenize(text: str) -> List[str]:
    """
    Tokenize text for BM25 indexing and querying.

    Args:
        text: Raw field text or query string

    Returns:
        List of normalized terms in original order (duplicates kept,
        term frequencies are counted by the caller)

    Examples:
        >>> tokenize("Growth at Airbnb")
        ['growth', 'airbnb']

        >>> tokenize("Product-market fit: what's the secret?")
        ['product-market', 'fit', "what's", 'secret']

        >>> tokenize("Yeah, um, it's basically the thing")
        ["it's"]

        >>> tokenize("   ")
        []
    """
    if not text:
        return []

    text = _NON_TOKEN_CHARS.sub(' ', text.lower())

    return [
        token for token in text.split()
        if len(token) > 1 and token not in STOPWORDS
    ]
