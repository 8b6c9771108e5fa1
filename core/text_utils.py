"""
Text helpers for consistent display of names, locations and crops.
"""

import re

ABBREVIATIONS = {'nin', 'bvn', 'lga', 'id', 'api', 'sms', 'gps', 'pdf', 'qr'}
LOCATION_ABBREVIATIONS = {'lga', 'fc', 'fct'}
PREPOSITIONS = {
    'of', 'in', 'on', 'at', 'to', 'for', 'with', 'by', 'from', 'and', 'or', 'the', 'a', 'an',
}


def clean_text(text):
    """Trim and collapse internal whitespace."""
    if not text:
        return ''
    return re.sub(r'\s+', ' ', str(text)).strip()


def to_title_case(text):
    """
    Title-case free text.

    Known abbreviations are upper-cased; short prepositions stay lower-case
    unless they start the text.
    """
    text = clean_text(text)
    if not text:
        return ''

    words = []
    for index, word in enumerate(text.lower().split(' ')):
        if word in ABBREVIATIONS:
            words.append(word.upper())
        elif word in PREPOSITIONS and index > 0:
            words.append(word)
        else:
            words.append(word[:1].upper() + word[1:])
    return ' '.join(words)


def format_location(location):
    """Format a state / LGA / ward name, e.g. 'abuja municipal lga' -> 'Abuja Municipal LGA'."""
    location = clean_text(location)
    if not location:
        return ''

    words = []
    for word in re.split(r'[\s-]+', location.lower()):
        if not word:
            continue
        if word in LOCATION_ABBREVIATIONS:
            words.append(word.upper())
        else:
            words.append(word[:1].upper() + word[1:])
    return ' '.join(words)


def format_full_name(first_name=None, middle_name=None, last_name=None):
    parts = [to_title_case(part) for part in (first_name, middle_name, last_name) if part]
    return ' '.join(part for part in parts if part)
