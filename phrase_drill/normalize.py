"""Text canonicalisation for comparing spoken or typed phrases.

Pipeline: lower-case, expand informal contractions, strip punctuation
(apostrophes survive), collapse whitespace, trim. The result is a fixpoint:
normalising already-normalised text returns it unchanged.
"""
from __future__ import annotations

import re

CONTRACTIONS: dict[str, str] = {
    "i'm": "i am",
    "you're": "you are",
    "he's": "he is",
    "she's": "she is",
    "it's": "it is",
    "we're": "we are",
    "they're": "they are",
    "i've": "i have",
    "you've": "you have",
    "we've": "we have",
    "they've": "they have",
    "i'll": "i will",
    "you'll": "you will",
    "he'll": "he will",
    "she'll": "she will",
    "we'll": "we will",
    "they'll": "they will",
    "i'd": "i would",
    "you'd": "you would",
    "he'd": "he would",
    "she'd": "she would",
    "we'd": "we would",
    "they'd": "they would",
    "isn't": "is not",
    "aren't": "are not",
    "wasn't": "was not",
    "weren't": "were not",
    "haven't": "have not",
    "hasn't": "has not",
    "hadn't": "had not",
    "won't": "will not",
    "wouldn't": "would not",
    "don't": "do not",
    "doesn't": "does not",
    "didn't": "did not",
    "can't": "cannot",
    "couldn't": "could not",
    "shouldn't": "should not",
    "mightn't": "might not",
    "mustn't": "must not",
    "let's": "let us",
    "that's": "that is",
    "who's": "who is",
    "what's": "what is",
    "here's": "here is",
    "there's": "there is",
    "where's": "where is",
    "wanna": "want to",
    "gonna": "going to",
    "gotta": "got to",
    "kinda": "kind of",
    "sorta": "sort of",
    "outta": "out of",
    "lotsa": "lots of",
    "coulda": "could have",
    "woulda": "would have",
    "shoulda": "should have",
    "musta": "must have",
    "'cause": "because",
    "cuz": "because",
    "cos": "because",
}

# Longest keys first so the alternation never stops at a shorter prefix.
# Keys only match as whole tokens: "cos" must not rewrite "cost".
_CONTRACTION_RE = re.compile(
    r"(?<![\w'])("
    + "|".join(re.escape(k) for k in sorted(CONTRACTIONS, key=len, reverse=True))
    + r")(?![\w'])",
    re.IGNORECASE,
)
_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "ʼ": "'"})
_PUNCTUATION_RE = re.compile(r"[^\w\s']")
_WHITESPACE_RE = re.compile(r"\s+")


def expand_contractions(text: str) -> str:
    """Replace informal short forms ("don't", "gonna", "'cause") with full words."""
    return _CONTRACTION_RE.sub(lambda m: CONTRACTIONS[m.group(1).lower()], text)


def strip_punctuation(text: str) -> str:
    """Drop every character that is not a word character, whitespace or apostrophe."""
    return _PUNCTUATION_RE.sub("", text)


def normalize(text: str) -> str:
    """Canonicalise *text* for comparison. Empty or punctuation-only input gives ""."""
    text = text.lower().translate(_APOSTROPHES)
    text = expand_contractions(text)
    text = strip_punctuation(text)
    # Stripping can expose a short form ("gon-na"); expand once more so the
    # output is stable under a second pass.
    text = expand_contractions(text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()
