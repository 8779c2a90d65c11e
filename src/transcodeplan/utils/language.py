"""Language code normalization for subtitle metadata tags."""

# ISO 639-1 (2-letter) to ISO 639-2/B (3-letter); ffmpeg language tags use the latter
ISO_639_1_TO_639_2 = {
    "en": "eng",
    "es": "spa",
    "fr": "fre",
    "de": "ger",
    "it": "ita",
    "pt": "por",
    "ru": "rus",
    "ja": "jpn",
    "ko": "kor",
    "zh": "chi",
    "ar": "ara",
    "hi": "hin",
    "nl": "dut",
    "pl": "pol",
    "tr": "tur",
    "sv": "swe",
    "da": "dan",
    "no": "nor",
    "fi": "fin",
    "cs": "cze",
    "hu": "hun",
    "ro": "rum",
    "th": "tha",
    "vi": "vie",
    "id": "ind",
    "he": "heb",
    "el": "gre",
    "uk": "ukr",
    "ms": "may",
}

# English names accepted when a user types the language instead of a code
LANGUAGE_NAME_TO_639_2 = {
    "english": "eng",
    "spanish": "spa",
    "french": "fre",
    "german": "ger",
    "italian": "ita",
    "portuguese": "por",
    "russian": "rus",
    "japanese": "jpn",
    "korean": "kor",
    "chinese": "chi",
    "arabic": "ara",
    "hindi": "hin",
    "dutch": "dut",
    "polish": "pol",
    "turkish": "tur",
    "swedish": "swe",
    "danish": "dan",
    "norwegian": "nor",
    "finnish": "fin",
    "czech": "cze",
    "hungarian": "hun",
    "romanian": "rum",
    "thai": "tha",
    "vietnamese": "vie",
    "indonesian": "ind",
    "hebrew": "heb",
    "greek": "gre",
    "ukrainian": "ukr",
    "malay": "may",
}


def normalize_language_code(code: str) -> str:
    """Normalize a language code or English name to ISO 639-2.

    Unknown values are returned lower-cased so the user's intent survives.

    Args:
        code: 2-letter code, 3-letter code or language name

    Returns:
        3-letter code where one is known

    Example:
        normalize_language_code("zh")       # "chi"
        normalize_language_code("Japanese") # "jpn"
        normalize_language_code("ENG")      # "eng"
    """
    if not code:
        return code

    lowered = code.strip().lower()
    if len(lowered) == 2:
        return ISO_639_1_TO_639_2.get(lowered, lowered)
    return LANGUAGE_NAME_TO_639_2.get(lowered, lowered)
